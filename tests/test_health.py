"""Smoke tests for the liveness endpoint and app wiring."""
from fastapi.testclient import TestClient

from src.cbam.settings import get_settings
from src.main import app

client = TestClient(app)


def test_health_reports_ok() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_favicon_request_has_no_body() -> None:
    response = client.get("/favicon.ico")

    assert response.status_code == 204
    assert response.content == b""


def test_app_title_comes_from_settings() -> None:
    assert app.title == get_settings().app_name
