"""
Export endpoint tests
"""

import csv
import io
import json
import zipfile

import pytest
from httpx import AsyncClient

from interactive_video.services.scorm_export import REQUIRED_FILES

pytestmark = pytest.mark.integration


@pytest.fixture
async def video(api_client: AsyncClient, sample_video_payload):
    r = await api_client.post("/api/v1/videos", json=sample_video_payload)
    assert r.status_code == 201, r.text
    return r.json()


class TestElementListExport:

    async def test_json_export(self, api_client: AsyncClient, video):
        r = await api_client.get("/api/v1/videos/v1/export", params={"format": "json"})

        assert r.status_code == 200
        assert r.headers["content-type"].startswith("application/json")
        assert "v1_elements.json" in r.headers["content-disposition"]
        document = json.loads(r.text)
        assert document["videoId"] == "v1"
        assert [e["id"] for e in document["elements"]] == ["poll-1", "q1", "branch", "spot"]

    async def test_json_is_the_default(self, api_client: AsyncClient, video):
        r = await api_client.get("/api/v1/videos/v1/export")
        assert r.status_code == 200
        assert json.loads(r.text)["title"] == "Intro Video"

    async def test_csv_export(self, api_client: AsyncClient, video):
        r = await api_client.get("/api/v1/videos/v1/export", params={"format": "CSV"})

        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        rows = list(csv.DictReader(io.StringIO(r.text)))
        assert [row["id"] for row in rows] == ["poll-1", "q1", "branch", "spot"]
        assert json.loads(rows[1]["options"])[0]["isCorrect"] is True

    async def test_exported_json_imports_back(self, api_client: AsyncClient, video):
        exported = (await api_client.get("/api/v1/videos/v1/export")).text

        r = await api_client.post(
            "/api/v1/videos/v1/import", json={"format": "json", "payload": exported}
        )

        assert r.status_code == 200, r.text
        assert r.json()["imported"] == 4

    async def test_unknown_format(self, api_client: AsyncClient, video):
        r = await api_client.get("/api/v1/videos/v1/export", params={"format": "xml"})
        assert r.status_code == 400
        assert "Unsupported format" in r.json()["error"]

    async def test_missing_video(self, api_client: AsyncClient):
        r = await api_client.get("/api/v1/videos/nope/export")
        assert r.status_code == 404


class TestScormExport:

    async def test_scorm_package(self, api_client: AsyncClient, video):
        r = await api_client.get("/api/v1/videos/v1/export", params={"format": "scorm"})

        assert r.status_code == 200
        assert r.headers["content-type"] == "application/zip"
        assert "v1_scorm_package.zip" in r.headers["content-disposition"]

        with zipfile.ZipFile(io.BytesIO(r.content)) as archive:
            assert sorted(archive.namelist()) == sorted(REQUIRED_FILES)
            metadata = json.loads(archive.read("metadata.json"))
        assert metadata["videoId"] == "v1"
        assert metadata["duration"] == 120

    async def test_invalid_video_is_rejected(self, api_client: AsyncClient, sample_video_payload):
        sample_video_payload["elements"].append(
            {"id": "q1", "type": "hotspot", "timestamp": 100, "duration": 5}
        )
        await api_client.post("/api/v1/videos", json=sample_video_payload)

        r = await api_client.get("/api/v1/videos/v1/export", params={"format": "scorm"})

        assert r.status_code == 400
        assert "Duplicate id 'q1'" in r.json()["error"]

    async def test_scorm_disabled(self, api_client: AsyncClient, video, flags):
        flags("scorm_export", False)

        r = await api_client.get("/api/v1/videos/v1/export", params={"format": "scorm"})
        assert r.status_code == 404

        r = await api_client.get("/api/v1/export/formats")
        assert "scorm" not in [f["format"] for f in r.json()["formats"]]

    async def test_formats(self, api_client: AsyncClient):
        r = await api_client.get("/api/v1/export/formats")

        assert r.status_code == 200
        body = r.json()
        assert [f["format"] for f in body["formats"]] == ["json", "csv", "scorm"]
        assert body["default"] == "json"

    async def test_validate_endpoint(self, api_client: AsyncClient, video):
        r = await api_client.get("/api/v1/videos/v1/export/validate")

        assert r.status_code == 200
        body = r.json()
        assert body["valid"] is True
        assert body["errors"] == []
        assert body["estimate"]["total_estimated_bytes"] > 0
