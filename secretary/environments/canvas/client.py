"""
Canvas API Client - the source of assignment records.

Assignments are read through assignment groups (one request returns
groups with their assignments embedded). Canvas paginates with RFC 5988
Link headers; pages are consumed until no rel="next" link is sent.

API Reference:
==============
- Assignment groups: https://canvas.instructure.com/doc/api/assignment_groups.html
- Pagination: https://canvas.instructure.com/doc/api/file.pagination.html
"""

import logging
from typing import List, Optional

import httpx

from secretary.core.config import settings
from secretary.environments.base import APIError, ValidationError
from secretary.environments.canvas.schemas import (
    AssignmentRecord,
    CanvasAssignment,
    CanvasAssignmentGroup,
    CanvasCourse,
)


logger = logging.getLogger("secretary.environments.canvas")


class CanvasClient:
    """
    Canvas REST client authenticated with a user's API token.

    Example:
        client = CanvasClient(api_token="1~abc...")
        records = await client.fetch_course_records(12345)
    """

    PAGE_SIZE = 100

    def __init__(
        self,
        api_token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_token = api_token
        self.base_url = (base_url or settings.CANVAS_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

        if not self.base_url:
            raise ValidationError("CANVAS_BASE_URL is not configured")

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Accept": "application/json",
        }

    async def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        """
        GET an absolute Canvas URL.

        Raises:
            APIError: On network failure or a non-200 status
        """
        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(
                    url,
                    headers=self._get_headers(),
                    params=params,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in Canvas API: {e}")
                raise APIError(f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Canvas API error: {response.status_code} - {response.text}")
            raise APIError(
                f"Canvas request failed ({response.status_code})",
                status_code=response.status_code,
                response=response.text,
            )

        return response

    async def get_course(self, course_id: int) -> CanvasCourse:
        response = await self._get(f"{self.base_url}/api/v1/courses/{course_id}")
        return CanvasCourse(**response.json())

    async def list_assignments(self, course_id: int) -> List[CanvasAssignment]:
        """
        All assignments of a course, across every page of assignment groups.
        """
        url: Optional[str] = f"{self.base_url}/api/v1/courses/{course_id}/assignment_groups"
        params: Optional[dict] = {
            "include[]": "assignments",
            "per_page": self.PAGE_SIZE,
        }

        assignments: List[CanvasAssignment] = []
        pages = 0
        while url:
            response = await self._get(url, params=params)
            pages += 1

            for raw_group in response.json():
                group = CanvasAssignmentGroup(**raw_group)
                assignments.extend(group.assignments)

            # The next link already carries every query parameter
            next_link = response.links.get("next")
            url = next_link.get("url") if next_link else None
            params = None

        logger.info(
            f"Fetched {len(assignments)} assignments",
            extra={"course_id": course_id, "pages": pages},
        )
        return assignments

    async def fetch_course_records(self, course_id: int) -> List[AssignmentRecord]:
        """Course metadata joined onto each of its assignments."""
        course = await self.get_course(course_id)
        assignments = await self.list_assignments(course_id)
        return [AssignmentRecord.from_canvas(a, course) for a in assignments]
