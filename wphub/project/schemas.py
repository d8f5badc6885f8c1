"""Project domain schemas."""

import uuid
from datetime import date

from pydantic import BaseModel, Field
from sqlmodel import SQLModel

from wphub.core.schemas import UtcDatetime
from wphub.project.models import ProjectPriority, ProjectStatus

PROJECT_LEAD = "Project Lead"


class TemplatePlugin(BaseModel):
    plugin_id: uuid.UUID
    version: str | None = None


class ProjectPlugin(TemplatePlugin):
    installed: bool = False


class AssignedMember(BaseModel):
    user_id: uuid.UUID
    role_on_project: str = PROJECT_LEAD


class TemplateCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    team_id: uuid.UUID | None = None
    plugins: list[TemplatePlugin] = []


class TemplateRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str | None
    team_id: uuid.UUID | None
    plugins: list[TemplatePlugin]
    created_by: str | None
    created_at: UtcDatetime


class ProjectCreate(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    team_id: uuid.UUID
    site_id: uuid.UUID
    template_id: uuid.UUID | None = None
    status: ProjectStatus = ProjectStatus.planning
    priority: ProjectPriority = ProjectPriority.medium
    start_date: date | None = None
    end_date: date | None = None


class ProjectRead(SQLModel):
    id: uuid.UUID
    title: str
    description: str | None
    team_id: uuid.UUID
    site_id: uuid.UUID
    template_id: uuid.UUID | None
    status: ProjectStatus
    priority: ProjectPriority
    start_date: date | None
    end_date: date | None
    plugins: list[ProjectPlugin]
    assigned_members: list[AssignedMember]
    timeline_events: list[dict]
    notes: str
    created_by: str | None
    created_at: UtcDatetime
    updated_at: UtcDatetime
