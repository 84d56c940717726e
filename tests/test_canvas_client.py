"""
Tests for CanvasClient - assignment groups, pagination and record joining.
"""

import pytest
from unittest.mock import AsyncMock, patch

import httpx

from secretary.environments.base import APIError, ValidationError
from secretary.environments.canvas import CanvasClient


BASE = "https://canvas.example.edu"


def _group(group_id, *assignments):
    return {"id": group_id, "name": f"Group {group_id}", "assignments": list(assignments)}


def _assignment(assignment_id, due_at="2025-01-16T07:59:00Z"):
    return {
        "id": assignment_id,
        "name": f"Assignment {assignment_id}",
        "due_at": due_at,
        "points_possible": 10,
        "html_url": f"{BASE}/courses/1/assignments/{assignment_id}",
    }


@pytest.fixture
def canvas():
    return CanvasClient(api_token="canvas-token", base_url=BASE)


class TestCanvasClient:

    def test_base_url_required(self, monkeypatch):
        from secretary.core.config import settings

        monkeypatch.setattr(settings, "CANVAS_BASE_URL", "")
        with pytest.raises(ValidationError):
            CanvasClient(api_token="t")

    @pytest.mark.asyncio
    async def test_follows_link_header(self, canvas):
        next_url = f"{BASE}/api/v1/courses/1/assignment_groups?include[]=assignments&per_page=100&page=2"
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = [
                httpx.Response(
                    200,
                    json=[_group(1, _assignment(1), _assignment(2))],
                    headers={"Link": f'<{next_url}>; rel="next"'},
                ),
                httpx.Response(200, json=[_group(2, _assignment(3, due_at=None))]),
            ]

            assignments = await canvas.list_assignments(1)

            assert [a.id for a in assignments] == [1, 2, 3]
            assert assignments[2].due_at is None

            first_call, second_call = mock_get.call_args_list
            assert first_call[0][0] == f"{BASE}/api/v1/courses/1/assignment_groups"
            assert first_call[1]["params"] == {"include[]": "assignments", "per_page": 100}
            assert second_call[0][0] == next_url
            assert second_call[1]["params"] is None
            assert first_call[1]["headers"]["Authorization"] == "Bearer canvas-token"

    @pytest.mark.asyncio
    async def test_fetch_course_records_joins_course(self, canvas):
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = [
                httpx.Response(200, json={"id": 1, "name": "Intro to CS", "course_code": "CS101"}),
                httpx.Response(200, json=[_group(1, _assignment(5))]),
            ]

            records = await canvas.fetch_course_records(1)

            assert len(records) == 1
            assert records[0].course_code == "CS101"
            assert records[0].course_name == "Intro to CS"
            assert records[0].course_id == 1
            assert records[0].id == 5

    @pytest.mark.asyncio
    async def test_error_status_raises_api_error(self, canvas):
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = httpx.Response(401, text="Invalid access token")

            with pytest.raises(APIError) as exc_info:
                await canvas.get_course(1)

            assert exc_info.value.status_code == 401
            assert exc_info.value.response == "Invalid access token"
