"""Project domain router."""

import uuid

from fastapi import APIRouter, Depends, status

from wphub.auth.dependencies import CurrentUserDep, require_auth
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep
from wphub.project import service
from wphub.project.schemas import ProjectCreate, ProjectRead, TemplateCreate, TemplateRead

router = APIRouter(
    prefix=Routes.PROJECT.prefix,
    tags=[Routes.PROJECT.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


@router.get("/", response_model=list[ProjectRead])
async def list_projects(user: CurrentUserDep, session: SessionDep):
    """Projects of the teams the current user is in."""
    return service.list_projects(session, user)


@router.post(
    "/",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def create_project(data: ProjectCreate, user: CurrentUserDep, session: SessionDep):
    return service.create_project(session, user, data)


@router.get("/templates", response_model=list[TemplateRead])
async def list_templates(user: CurrentUserDep, session: SessionDep):
    return service.list_templates(session, user)


@router.post(
    "/templates",
    response_model=TemplateRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def create_template(
    data: TemplateCreate, user: CurrentUserDep, session: SessionDep
):
    return service.create_template(session, user, data)


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_project(project_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_project_for_user(session, project_id, user)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_project(
    project_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    project = service.get_project_for_user(session, project_id, user)
    service.delete_project(session, project, user)
