"""Tests for the bearer token gate."""

import pytest
from fastapi.testclient import TestClient

from task_service.core.auth import extract_bearer_token, is_authorized
from task_service.main import create_app

from .fakes import InMemoryTaskRepository

ROUTES = [
    ("POST", "/v1/create_task"),
    ("GET", "/v1/tasks/1"),
    ("PUT", "/v1/tasks/1"),
    ("DELETE", "/v1/tasks/1"),
    ("GET", "/v1/task_user/1"),
]


@pytest.fixture()
def anonymous_client(settings, fake_repository):
    app = create_app(settings=settings, repository=fake_repository)
    with TestClient(app) as client:
        yield client


@pytest.mark.parametrize("method, path", ROUTES)
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer wrong-token"},
        {"Authorization": "test-token"},
        {"Authorization": "Basic test-token"},
        {"Authorization": "Bearer "},
    ],
)
def test_rejects_bad_credentials(anonymous_client, fake_repository, method, path, headers):
    response = anonymous_client.request(
        method, path, headers=headers, json={"title": "x", "user_id": 1}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert fake_repository.calls == []


def test_rejects_before_body_decoding(anonymous_client, fake_repository):
    response = anonymous_client.post(
        "/v1/create_task",
        content="{broken",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 401
    assert fake_repository.calls == []


def test_accepts_lowercase_scheme(anonymous_client):
    response = anonymous_client.get(
        "/v1/task_user/1", headers={"Authorization": "bearer test-token"}
    )
    assert response.status_code == 200


def test_unknown_v1_path_is_gated(anonymous_client):
    assert anonymous_client.get("/v1/nothing-here").status_code == 401


def test_root_and_health_are_public(anonymous_client):
    assert anonymous_client.get("/").status_code == 200
    assert anonymous_client.get("/health").status_code == 200


def test_unset_secret_rejects_everyone(settings):
    settings.auth_token = ""
    app = create_app(settings=settings, repository=InMemoryTaskRepository())
    with TestClient(app) as client:
        response = client.get("/v1/task_user/1", headers={"Authorization": "Bearer "})
        assert response.status_code == 401
        response = client.get("/v1/task_user/1", headers={"Authorization": "Bearer anything"})
        assert response.status_code == 401


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("BEARER abc") == "abc"
    assert extract_bearer_token("Token abc") is None
    assert extract_bearer_token("Bearer") is None
    assert extract_bearer_token(None) is None


def test_is_authorized():
    assert is_authorized("secret", "secret")
    assert not is_authorized("secret", "other")
    assert not is_authorized(None, "secret")
    assert not is_authorized("", "")
