"""Project domain models."""

import uuid
from datetime import date
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from wphub.core.mixins import CreatedByMixin, TimestampMixin


class ProjectStatus(str, Enum):
    planning = "planning"
    in_progress = "in_progress"
    completed = "completed"
    on_hold = "on_hold"


class ProjectPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class ProjectTemplate(TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "project_templates"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=255)
    description: str | None = Field(default=None)
    # None means the template is available to everyone.
    team_id: uuid.UUID | None = Field(default=None, index=True)
    plugins: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )


class Project(TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "projects"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None)
    team_id: uuid.UUID = Field(index=True)
    site_id: uuid.UUID = Field(index=True)
    template_id: uuid.UUID | None = Field(default=None)
    status: ProjectStatus = Field(default=ProjectStatus.planning, max_length=20)
    priority: ProjectPriority = Field(default=ProjectPriority.medium, max_length=10)
    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)
    plugins: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    assigned_members: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    timeline_events: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    notes: str = Field(default="")
