# tests/conftest.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from task_service.core.config import Settings
from task_service.core.database import create_session_factory, init_db
from task_service.main import create_app
from task_service.repositories.tasks import SQLTaskRepository

from .fakes import InMemoryTaskRepository

TOKEN = "test-token"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        auth_token=TOKEN,
        database_url="sqlite://",
        api_prefix="/v1",
        allowed_origins=["http://localhost:3000"],
        log_level="WARNING",
    )


@pytest.fixture()
def engine():
    """Fresh in-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    assert init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def sql_repository(engine) -> SQLTaskRepository:
    return SQLTaskRepository(create_session_factory(engine))


@pytest.fixture()
def fake_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture(params=["sql", "memory"])
def repository(request, sql_repository, fake_repository):
    """Both storage implementations must satisfy the API contract."""
    if request.param == "sql":
        return sql_repository
    return fake_repository


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture()
def client(settings, repository, auth_headers) -> TestClient:
    app = create_app(settings=settings, repository=repository)
    with TestClient(app, headers=auth_headers) as client:
        yield client


@pytest.fixture()
def fake_client(settings, fake_repository, auth_headers) -> TestClient:
    app = create_app(settings=settings, repository=fake_repository)
    with TestClient(app, headers=auth_headers) as client:
        yield client
