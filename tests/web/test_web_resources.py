"""Tests for resource and strategy search endpoints."""

import httpx
from fastapi.testclient import TestClient

from learnplan.config import AppConfig, SearchSettings
from learnplan.search.client import ResourceSearchClient
from learnplan.web.api import create_app


class TestResources:
    """Tests for GET /resources/{student_id}."""

    def test_fallback_resources(self, client):
        response = client.get("/resources/student-1", params={"needs": "dyslexia"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 3
        assert data[0]["title"] == "Understanding dyslexia in the Classroom"
        assert data[0]["type"] == "article"

    def test_needs_required(self, client):
        response = client.get("/resources/student-1")

        assert response.status_code == 400
        assert response.json()["message"] == "Student needs are required"

    def test_blank_needs(self, client):
        assert client.get("/resources/student-1", params={"needs": "  "}).status_code == 400

    def test_search_results(self, store):
        def handler(request):
            return httpx.Response(
                200,
                json={"results": [{"title": "ADHD video", "url": "https://www.youtube.com/x", "content": "Tips"}]},
            )

        search = ResourceSearchClient(
            SearchSettings(api_key="tvly-test"), transport=httpx.MockTransport(handler)
        )
        client = TestClient(create_app(config=AppConfig(mock_mode=True), store=store, search_client=search))

        data = client.get("/resources/student-1", params={"needs": "ADHD"}).json()["data"]

        assert data == [
            {
                "title": "ADHD video",
                "description": "Tips...",
                "url": "https://www.youtube.com/x",
                "source": "youtube.com",
                "type": "video",
                "difficulty": "intermediate",
                "ageGroup": "all",
            }
        ]


class TestStrategies:
    """Tests for GET /strategies/{challenge}."""

    def test_fallback_strategies(self, client):
        response = client.get("/strategies/attention")

        assert response.status_code == 200
        titles = [s["title"] for s in response.json()["data"]]
        assert titles[0] == "Evidence-Based Strategies for attention"
        assert len(titles) == 3
