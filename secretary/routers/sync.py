"""
Sync Router - pushes Canvas assignments into the caller's Google Calendar.

Endpoints:
==========
- POST /sync/assignments          → Sync records the extension already fetched
- POST /sync/courses/{course_id}  → Fetch a course from Canvas, then sync it

Both take the caller's Google access token as a bearer credential. The
response reports per-record outcomes; one failing assignment never fails
the request.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from secretary.deps import get_canvas_client, get_google_access_token, get_sync_engine
from secretary.environments.base import APIError, AuthError, ValidationError
from secretary.environments.canvas import CanvasClient
from secretary.schemas.sync import SyncAssignmentsRequest, SyncCourseRequest, SyncResultOut
from secretary.services.sync_engine import SyncEngine, SyncResult


logger = logging.getLogger("secretary.routers.sync")


router = APIRouter(prefix="/sync", tags=["sync"])


def _to_response(result: SyncResult) -> SyncResultOut:
    return SyncResultOut(
        success_count=result.success_count,
        failed_count=result.failed_count,
        errors=result.errors,
    )


async def _run_sync(engine: SyncEngine, access_token: str, records, time_zone: str) -> SyncResultOut:
    try:
        result = await engine.sync_assignments(access_token, records, time_zone)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _to_response(result)


@router.post("/assignments", response_model=SyncResultOut)
async def sync_assignments(
    body: SyncAssignmentsRequest,
    access_token: str = Depends(get_google_access_token),
    engine: SyncEngine = Depends(get_sync_engine),
):
    """
    Create or update one calendar event per dated assignment.

    Assignments without a due date are skipped and do not appear in
    either count.
    """
    logger.info(f"Syncing {len(body.assignments)} assignments")
    return await _run_sync(engine, access_token, body.assignments, body.timezone)


@router.post("/courses/{course_id}", response_model=SyncResultOut)
async def sync_course(
    course_id: int,
    body: SyncCourseRequest,
    access_token: str = Depends(get_google_access_token),
    canvas: CanvasClient = Depends(get_canvas_client),
    engine: SyncEngine = Depends(get_sync_engine),
):
    """
    Pull every assignment of a Canvas course and sync it.

    Raises:
        502 Bad Gateway: If Canvas cannot be read
    """
    try:
        records = await canvas.fetch_course_records(course_id)
    except APIError as e:
        logger.error(
            f"Canvas fetch failed: {e}",
            extra={"course_id": course_id, "status_code": e.status_code},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Canvas request failed: {e}",
        )

    return await _run_sync(engine, access_token, records, body.timezone)
