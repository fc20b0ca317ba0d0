from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlalchemy import Index
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    return datetime.now(UTC)


class ProjectStatus(StrEnum):
    CREATING = "CREATING"
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    TERMINATING = "TERMINATING"
    ERROR = "ERROR"
    PARTIAL = "PARTIAL"


class EnvironmentCategory(StrEnum):
    GENERAL = "general"
    AUTH = "auth"
    PAYMENT = "payment"
    DATABASE = "database"


class Project(SQLModel, table=True):
    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_owner_created", "owner_id", "created_at"),)

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    owner_id: str = Field(index=True)
    name: str
    description: str | None = None
    status: ProjectStatus = Field(default=ProjectStatus.CREATING)
    github_repo: str | None = None
    database_url: str | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc)


class Sandbox(SQLModel, table=True):
    __tablename__ = "sandboxes"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    public_url: str | None = None
    status: ProjectStatus = Field(default=ProjectStatus.CREATING)
    db_host: str | None = None
    db_port: int | None = None
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Environment(SQLModel, table=True):
    __tablename__ = "environments"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    key: str
    value: str
    category: str | None = Field(default=None, index=True)
    is_secret: bool = Field(default=False)
    created_at: datetime = Field(default_factory=now_utc, index=True)


class ORMReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SandboxRead(ORMReadModel):
    id: str
    project_id: str
    public_url: str | None = None
    status: ProjectStatus
    db_host: str | None = None
    db_port: int | None = None
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = PydanticField(default=None, exclude=True)
    created_at: datetime


class EnvironmentRead(ORMReadModel):
    id: str
    project_id: str
    key: str
    value: str
    category: str | None = None
    is_secret: bool = False
    created_at: datetime


class ProjectSummaryRead(ORMReadModel):
    id: str
    owner_id: str
    name: str
    description: str | None = None
    status: ProjectStatus
    github_repo: str | None = None
    created_at: datetime
    updated_at: datetime


class ProjectRead(ProjectSummaryRead):
    # Connection credentials stay out of serialized responses.
    database_url: str | None = PydanticField(default=None, exclude=True)
    sandboxes: list[SandboxRead] = PydanticField(default_factory=list)
    environments: list[EnvironmentRead] = PydanticField(default_factory=list)


class ResolvedEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    is_synthesized: bool


class ProjectDetailRead(ProjectRead):
    endpoint: ResolvedEndpoint


class EnvironmentGroupsRead(BaseModel):
    general: list[EnvironmentRead] = PydanticField(default_factory=list)
    auth: list[EnvironmentRead] = PydanticField(default_factory=list)
    payment: list[EnvironmentRead] = PydanticField(default_factory=list)


class DatabaseConnectionRead(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    host: str
    port: int
    name: str
    user: str
    password: str
