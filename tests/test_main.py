"""Tests for the FastAPI tool endpoints"""
import pytest
from unittest.mock import AsyncMock, Mock, patch
from fastapi.testclient import TestClient

from email_qa import main
from email_qa.main import app, get_toolkit
from email_qa.models.errors import ErrorCode, ValidationToolError


@pytest.fixture
def toolkit():
    toolkit = Mock()
    toolkit.validate_and_correct_html = AsyncMock(return_value="✅ HTML Enhancement completed successfully! Made 1 improvements")
    toolkit.enhance_email_design = AsyncMock(return_value="🎨 Email design enhancement completed! Preferred variant: optimized.")
    return toolkit


@pytest.fixture
def client(toolkit):
    app.dependency_overrides[get_toolkit] = lambda: toolkit
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "email-qa-tools"}

    def test_validate_and_correct_html(self, client, toolkit):
        response = client.post(
            "/tools/validate-and-correct-html",
            json={"campaign_path": "/campaigns/antalya", "trace_id": "trace-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"].startswith("✅ HTML Enhancement completed successfully!")
        assert body["trace_id"] == "trace-1"
        toolkit.validate_and_correct_html.assert_awaited_once_with("/campaigns/antalya", "trace-1")

    def test_enhance_email_design(self, client, toolkit):
        response = client.post("/tools/enhance-email-design", json={"campaign_path": "/campaigns/antalya"})

        assert response.status_code == 200
        assert "Preferred variant: optimized" in response.json()["status"]
        toolkit.enhance_email_design.assert_awaited_once_with("/campaigns/antalya", None)

    def test_tool_error_maps_to_status_and_detail(self, client, toolkit):
        toolkit.validate_and_correct_html.side_effect = ValidationToolError(
            ErrorCode.TEMPLATE_NOT_FOUND, "HTML template file not found", trace_id="trace-2"
        )

        response = client.post(
            "/tools/validate-and-correct-html",
            json={"campaign_path": "/campaigns/missing", "trace_id": "trace-2"},
        )

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["code"] == "TEMPLATE_NOT_FOUND"
        assert detail["trace_id"] == "trace-2"

    def test_missing_campaign_path_rejected(self, client):
        response = client.post("/tools/validate-and-correct-html", json={})

        assert response.status_code == 422


class TestToolkitDependency:

    def test_unconfigured_key_returns_503(self):
        with patch.object(main, "_toolkit", None), \
                patch("email_qa.main.create_toolkit", side_effect=ValueError("OPENAI_API_KEY not properly configured")):
            response = TestClient(app).post("/tools/enhance-email-design", json={"campaign_path": "/x"})

        assert response.status_code == 503
        assert response.json()["detail"] == "OPENAI_API_KEY not properly configured"
