"""Pytest fixtures for the Construction Project API."""

import pytest
from fastapi.testclient import TestClient

from construction_api.config import Settings
from construction_api.application import create_app

ADMIN_USERNAME = "site-admin"
ADMIN_PASSWORD = "correct horse battery staple"
SECRET_KEY = "unit-test-signing-secret-0123456789abcdef"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        secret_key=SECRET_KEY,
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def admin_headers(client):
    resp = client.post(
        "/api/v1/authentication/authenticate",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}
