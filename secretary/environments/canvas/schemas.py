"""
Canvas Schemas - assignment data pulled from the Canvas LMS REST API.

CanvasCourse / CanvasAssignment mirror the API payloads; AssignmentRecord
is the flattened, immutable form the sync engine consumes.

Reference: https://canvas.instructure.com/doc/api/assignments.html
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class CanvasCourse(BaseModel):
    """GET /api/v1/courses/:id"""
    id: int
    name: str
    course_code: str = ""
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None


class CanvasAssignment(BaseModel):
    """One assignment inside an assignment group."""
    id: int
    name: str
    description: Optional[str] = None
    due_at: Optional[datetime] = None
    unlock_at: Optional[datetime] = None
    lock_at: Optional[datetime] = None
    points_possible: Optional[float] = None
    html_url: str = ""
    course_id: Optional[int] = None


class CanvasAssignmentGroup(BaseModel):
    """GET /api/v1/courses/:id/assignment_groups?include[]=assignments"""
    id: int
    name: str = ""
    assignments: List[CanvasAssignment] = Field(default_factory=list)


class AssignmentRecord(BaseModel):
    """
    An assignment ready for calendar sync.

    `id` is Canvas's stable assignment id and the correlation key for the
    calendar event. Records without `due_at` are skipped by the sync.
    """
    id: int = Field(..., description="Canvas assignment id")
    name: str = Field(..., min_length=1, description="Assignment title")
    due_at: Optional[datetime] = Field(None, description="Due instant")
    unlock_at: Optional[datetime] = Field(None)
    points_possible: Optional[float] = Field(None)
    html_url: str = Field(..., description="Canonical Canvas link")
    description: Optional[str] = Field(None, description="Rich-text description")
    course_id: int
    course_name: str
    course_code: str

    class Config:
        frozen = True

    @classmethod
    def from_canvas(cls, assignment: CanvasAssignment, course: CanvasCourse) -> "AssignmentRecord":
        return cls(
            id=assignment.id,
            name=assignment.name,
            due_at=assignment.due_at,
            unlock_at=assignment.unlock_at,
            points_possible=assignment.points_possible,
            html_url=assignment.html_url,
            description=assignment.description,
            course_id=course.id,
            course_name=course.name,
            course_code=course.course_code,
        )
