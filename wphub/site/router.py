"""Site domain router."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from wphub.auth.dependencies import AdminUserDep, CurrentUserDep, require_auth
from wphub.auth.exceptions import AdminRequiredError
from wphub.connector.client import ConnectorDep
from wphub.connector.generator import connector_filename, generate_connector_code
from wphub.connector.schemas import ConnectionCheck
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep, SettingsDep
from wphub.site import service
from wphub.site.schemas import SiteCreate, SiteRead, SiteUpdate, SiteWithKey, SyncReport

router = APIRouter(
    prefix=Routes.SITE.prefix,
    tags=[Routes.SITE.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


@router.get("/", response_model=list[SiteRead])
async def list_sites(
    user: CurrentUserDep,
    session: SessionDep,
    all_sites: Annotated[bool, Query(alias="all")] = False,
):
    """Sites visible to the current user. Admins may pass ``all=true``."""
    if all_sites:
        if not user.is_admin:
            raise AdminRequiredError()
        return service.list_all_sites(session)
    return service.accessible_sites(session, user)


@router.post("/", response_model=SiteWithKey, status_code=status.HTTP_201_CREATED)
async def create_site(data: SiteCreate, user: CurrentUserDep, session: SessionDep):
    return service.create_site(session, user, data)


@router.post("/sync", response_model=SyncReport, responses={**CommonResponses.BAD_GATEWAY})
async def sync_all_sites(admin: AdminUserDep, session: SessionDep, connector: ConnectorDep):
    """Refresh plugin installation records from every site. Admin only."""
    return await service.sync_all_sites(session, admin, connector)


@router.get("/{site_id}", response_model=SiteRead, responses={**CommonResponses.NOT_FOUND})
async def get_site(site_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_site_for_user(session, site_id, user)


@router.patch(
    "/{site_id}", response_model=SiteRead, responses={**CommonResponses.NOT_FOUND}
)
async def update_site(
    site_id: uuid.UUID, data: SiteUpdate, user: CurrentUserDep, session: SessionDep
):
    site = service.get_site_for_user(session, site_id, user)
    return service.update_site(session, site, user, data)


@router.delete(
    "/{site_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_site(site_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    site = service.get_site_for_user(session, site_id, user)
    service.delete_site(session, site, user)


@router.post(
    "/{site_id}/test-connection",
    response_model=ConnectionCheck,
    responses={**CommonResponses.NOT_FOUND},
)
async def test_site_connection(
    site_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    connector: ConnectorDep,
):
    site = service.get_manageable_site(session, site_id, user)
    return await service.test_connection(session, site, connector)


@router.get(
    "/{site_id}/connector",
    response_class=Response,
    responses={
        200: {"content": {"application/x-php": {}}},
        **CommonResponses.NOT_FOUND,
    },
)
async def download_connector(
    site_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    settings: SettingsDep,
):
    """The connector plugin for this site, with its API key baked in."""
    site = service.get_manageable_site(session, site_id, user)
    code = generate_connector_code(site.api_key, settings.hub_url)
    return Response(
        content=code,
        media_type="application/x-php",
        headers={
            "Content-Disposition": f'attachment; filename="{connector_filename()}"'
        },
    )
