"""
Canvas Module - assignment records from the Canvas LMS.
"""

from secretary.environments.canvas.client import CanvasClient
from secretary.environments.canvas.schemas import (
    AssignmentRecord,
    CanvasAssignment,
    CanvasAssignmentGroup,
    CanvasCourse,
)

__all__ = [
    "CanvasClient",
    "AssignmentRecord",
    "CanvasAssignment",
    "CanvasAssignmentGroup",
    "CanvasCourse",
]
