from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app import main as app_main
from app.domain.models import Environment, Project, ProjectStatus, Sandbox
from app.infra import db

BASE_TS = datetime(2026, 1, 1, tzinfo=UTC)


@pytest.fixture()
def test_engine(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Engine:
    db_path = tmp_path / "console_test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(db, "engine", engine)
    return engine


@pytest.fixture()
def client(test_engine: Engine) -> Generator[TestClient, None, None]:
    test_client = TestClient(app_main.app)
    yield test_client
    test_client.close()


@pytest.fixture()
def seed_project(test_engine: Engine) -> Callable[..., Project]:
    def _seed(
        owner_id: str,
        *,
        name: str = "demo",
        created_offset_minutes: int = 0,
        public_urls: tuple[str | None, ...] = (),
        environments: tuple[dict[str, object], ...] = (),
        status: ProjectStatus = ProjectStatus.RUNNING,
        database_url: str | None = None,
        sandbox_database: dict[str, object] | None = None,
    ) -> Project:
        created_at = BASE_TS + timedelta(minutes=created_offset_minutes)
        project = Project(
            owner_id=owner_id,
            name=name,
            status=status,
            database_url=database_url,
            created_at=created_at,
            updated_at=created_at,
        )
        with Session(test_engine, expire_on_commit=False) as session:
            session.add(project)
            session.commit()
            for index, public_url in enumerate(public_urls):
                session.add(
                    Sandbox(
                        project_id=project.id,
                        public_url=public_url,
                        status=status,
                        created_at=created_at + timedelta(seconds=index),
                        **(sandbox_database if index == 0 and sandbox_database else {}),
                    )
                )
            for index, raw in enumerate(environments):
                session.add(
                    Environment(
                        project_id=project.id,
                        created_at=created_at + timedelta(seconds=index),
                        **raw,
                    )
                )
            session.commit()
        return project

    return _seed
