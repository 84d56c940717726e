"""
Sync schemas - request and response bodies for the /sync endpoints.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from secretary.core.timezones import resolve_time_zone
from secretary.environments.base import ValidationError
from secretary.environments.canvas.schemas import AssignmentRecord


def _validate_time_zone(value: str) -> str:
    try:
        resolve_time_zone(value)
    except ValidationError as e:
        raise ValueError(str(e))
    return value


class SyncAssignmentsRequest(BaseModel):
    """
    Body of POST /sync/assignments.

    Example request:
    {
        "timezone": "America/Los_Angeles",
        "assignments": [
            {
                "id": 987,
                "name": "Problem Set 3",
                "due_at": "2025-01-15T23:59:00Z",
                "html_url": "https://canvas.example.edu/courses/1/assignments/987",
                "course_id": 1,
                "course_name": "Intro to CS",
                "course_code": "CS101"
            }
        ]
    }
    """
    assignments: List[AssignmentRecord] = Field(default_factory=list)
    timezone: str

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        return _validate_time_zone(value)


class SyncCourseRequest(BaseModel):
    """Body of POST /sync/courses/{course_id}."""
    timezone: str

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        return _validate_time_zone(value)


class SyncResultOut(BaseModel):
    success_count: int
    failed_count: int
    errors: List[str] = Field(default_factory=list)
