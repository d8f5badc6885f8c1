"""Project domain service."""

import uuid

from sqlalchemy import or_
from sqlmodel import Session, col, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.db.commit import commit_or_rollback
from wphub.ownership.access import MANAGER_ROLES
from wphub.project.exceptions import (
    ProjectNotFoundError,
    ProjectPermissionError,
    TemplateNotFoundError,
)
from wphub.project.models import Project, ProjectTemplate
from wphub.project.schemas import (
    AssignedMember,
    ProjectCreate,
    ProjectPlugin,
    TemplateCreate,
    TemplatePlugin,
)
from wphub.site.service import get_site_for_user
from wphub.team.membership import get_user_role, is_effective_member
from wphub.team.models import Team
from wphub.team.service import get_team, user_team_ids
from wphub.user.models import User


def list_templates(session: Session, user: User) -> list[ProjectTemplate]:
    """Global templates plus those of the user's teams; admins see all."""
    statement = select(ProjectTemplate).order_by(col(ProjectTemplate.name))
    if not user.is_admin:
        team_ids = user_team_ids(session, user)
        conditions = [col(ProjectTemplate.team_id).is_(None)]
        if team_ids:
            conditions.append(col(ProjectTemplate.team_id).in_(team_ids))
        statement = statement.where(or_(*conditions))
    return list(session.exec(statement).all())


def _get_template_for_user(
    session: Session, template_id: uuid.UUID, user: User
) -> ProjectTemplate:
    template = session.get(ProjectTemplate, template_id)
    if template is None:
        raise TemplateNotFoundError()
    if template.team_id is None or user.is_admin:
        return template
    if template.team_id not in user_team_ids(session, user):
        raise TemplateNotFoundError()
    return template


def create_template(
    session: Session, user: User, data: TemplateCreate
) -> ProjectTemplate:
    if data.team_id is None:
        if not user.is_admin:
            raise ProjectPermissionError("Only admins can create global templates")
    else:
        team = get_team(session, data.team_id)
        if not (user.is_admin or get_user_role(team, user.id) in MANAGER_ROLES):
            raise ProjectPermissionError("You cannot add templates to this team")

    template = ProjectTemplate(
        name=data.name,
        description=data.description,
        team_id=data.team_id,
        plugins=[p.model_dump(mode="json") for p in data.plugins],
        created_by=user.email,
    )
    session.add(template)
    log_activity(
        session,
        user_email=user.email,
        action=f"Created project template: {template.name}",
        entity_type=EntityType.project,
        entity_id=template.id,
    )
    commit_or_rollback(session, "create project template")
    session.refresh(template)
    return template


def list_projects(session: Session, user: User) -> list[Project]:
    team_ids = user_team_ids(session, user)
    if not team_ids:
        return []
    statement = (
        select(Project)
        .where(col(Project.team_id).in_(team_ids))
        .order_by(col(Project.updated_at).desc())
    )
    return list(session.exec(statement).all())


def get_project_for_user(
    session: Session, project_id: uuid.UUID, user: User
) -> Project:
    project = session.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError()
    if user.is_admin or project.team_id in user_team_ids(session, user):
        return project
    raise ProjectNotFoundError()


def create_project(session: Session, user: User, data: ProjectCreate) -> Project:
    """Create a project for one of the user's teams on a site they can see.

    The template's plugin list is copied in, every entry not yet installed;
    the creator becomes the project lead.
    """
    team = get_team(session, data.team_id)
    if not is_effective_member(team, user.id):
        raise ProjectPermissionError("You are not a member of this team")
    get_site_for_user(session, data.site_id, user)

    plugins: list[ProjectPlugin] = []
    if data.template_id is not None:
        template = _get_template_for_user(session, data.template_id, user)
        plugins = [
            ProjectPlugin.model_validate(
                TemplatePlugin.model_validate(raw).model_dump()
            )
            for raw in template.plugins or []
        ]

    project = Project(
        title=data.title,
        description=data.description,
        team_id=team.id,
        site_id=data.site_id,
        template_id=data.template_id,
        status=data.status,
        priority=data.priority,
        start_date=data.start_date,
        end_date=data.end_date,
        plugins=[p.model_dump(mode="json") for p in plugins],
        assigned_members=[AssignedMember(user_id=user.id).model_dump(mode="json")],
        timeline_events=[],
        notes="",
        created_by=user.email,
    )
    session.add(project)
    log_activity(
        session,
        user_email=user.email,
        action=f"Created project: {project.title}",
        entity_type=EntityType.project,
        entity_id=project.id,
    )
    commit_or_rollback(session, "create project")
    session.refresh(project)
    return project


def delete_project(session: Session, project: Project, user: User) -> None:
    """Delete a project. The platform admin and the creator may always do so;
    otherwise a manager role in the project's team is required.

    The team may already be gone, leaving its projects behind.
    """
    if not (user.is_admin or project.created_by == user.email):
        team = session.get(Team, project.team_id)
        if team is None or get_user_role(team, user.id) not in MANAGER_ROLES:
            raise ProjectPermissionError()
    log_activity(
        session,
        user_email=user.email,
        action=f"Deleted project: {project.title}",
        entity_type=EntityType.project,
        entity_id=project.id,
    )
    session.delete(project)
    commit_or_rollback(session, "delete project")
