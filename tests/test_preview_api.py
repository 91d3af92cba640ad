"""
Preview endpoint tests
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


@pytest.fixture
async def video(api_client: AsyncClient, sample_video_payload):
    r = await api_client.post("/api/v1/videos", json=sample_video_payload)
    assert r.status_code == 201, r.text
    return r.json()


class TestPreview:

    async def test_quiz_enters_and_requests_pause(self, api_client: AsyncClient, video):
        r = await api_client.post("/api/v1/videos/v1/preview", json={"currentTime": 35})

        assert r.status_code == 200
        assert r.json() == {
            "active": ["q1"],
            "entered": ["q1"],
            "exited": [],
            "pauseRequested": True,
        }

    async def test_completed_element_stays_hidden(self, api_client: AsyncClient, video):
        r = await api_client.post(
            "/api/v1/videos/v1/preview", json={"currentTime": 35, "completedIds": ["q1"]}
        )
        assert r.json()["active"] == []
        assert r.json()["pauseRequested"] is False

    async def test_active_element_exits_after_window(self, api_client: AsyncClient, video):
        r = await api_client.post(
            "/api/v1/videos/v1/preview", json={"currentTime": 100, "activeIds": ["q1"]}
        )
        assert r.json()["exited"] == ["q1"]
        assert r.json()["active"] == []

    async def test_settings_disable_pause(self, api_client: AsyncClient, video):
        await api_client.put("/api/v1/videos/v1/settings", json={"pauseOnInteraction": False})

        r = await api_client.post("/api/v1/videos/v1/preview", json={"currentTime": 35})

        assert r.json()["pauseRequested"] is False

    async def test_unknown_video(self, api_client: AsyncClient):
        r = await api_client.post("/api/v1/videos/nope/preview", json={"currentTime": 1})
        assert r.status_code == 404

    async def test_feature_disabled(self, api_client: AsyncClient, video, flags):
        flags("preview_mode", False)
        r = await api_client.post("/api/v1/videos/v1/preview", json={"currentTime": 35})
        assert r.status_code == 404
        assert "preview_mode" in r.json()["error"]
