"""
Style templates API tests
"""

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


class TestTemplatesApi:

    def test_list_templates(self, test_client: TestClient):
        r = test_client.get("/api/v1/templates")

        assert r.status_code == 200
        assert [t["id"] for t in r.json()] == ["classic", "dark-overlay", "lower-third"]

    def test_get_template(self, test_client: TestClient):
        r = test_client.get("/api/v1/templates/lower-third")

        assert r.status_code == 200
        assert r.json()["position"]["y"] == 85

    def test_unknown_template(self, test_client: TestClient):
        r = test_client.get("/api/v1/templates/neon")

        assert r.status_code == 404
        assert r.json()["error"] == "Template not found"
