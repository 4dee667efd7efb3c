"""
Tests for the async API client against the ASGI app in-process.
"""

import httpx
import pytest

from curriculum_engine.api.dependencies import get_service
from curriculum_engine.api.main import app
from curriculum_engine.api_client import PracticeApiClient
from curriculum_engine.study.practice_service import PracticeService


@pytest.fixture
def api_client(plan_store, content_store, settings):
    service = PracticeService(plan_store, content_store, settings)
    app.dependency_overrides[get_service] = lambda: service
    yield PracticeApiClient("http://testserver", transport=httpx.ASGITransport(app=app))
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_get_session(api_client, day_one):
    session = await api_client.get_session("plan-1", day_one)
    assert session["lesson_id"] == "L1"
    assert session["review_count"] == 1


@pytest.mark.asyncio
async def test_submit_response(api_client, plan_store):
    result = await api_client.submit_response("plan-1", "v-dog", 0, lesson_id="L1")

    assert result["queue"] == "active"
    assert result["moved"] is True


@pytest.mark.asyncio
async def test_submit_results(api_client):
    result = await api_client.submit_results("plan-1", [{"item_id": "v-run", "grade": 3}])
    assert result["applied"] == 1


@pytest.mark.asyncio
async def test_errors_raise(api_client):
    with pytest.raises(httpx.HTTPStatusError) as exc:
        await api_client.submit_response("plan-1", "v-apple", 9)
    assert exc.value.response.status_code == 422
