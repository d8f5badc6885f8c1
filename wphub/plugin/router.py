"""Plugin domain router."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from wphub.auth.dependencies import CurrentUserDep, require_auth
from wphub.connector.client import ConnectorDep
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep
from wphub.plugin import service, wordpress
from wphub.plugin.schemas import (
    InstallReport,
    InstallRequest,
    PluginRead,
    PluginUpload,
    VersionCreate,
    WordPressPluginAdd,
    WordPressSearchResult,
)
from wphub.plugin.zip_parser import parse_plugin_zip

router = APIRouter(
    prefix=Routes.PLUGIN.prefix,
    tags=[Routes.PLUGIN.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


@router.get("/", response_model=list[PluginRead])
async def list_plugins(user: CurrentUserDep, session: SessionDep):
    return service.library_for(session, user)


@router.get(
    "/wordpress/search",
    response_model=WordPressSearchResult,
    responses={**CommonResponses.BAD_GATEWAY},
)
async def search_wordpress_plugins(
    search: Annotated[str, Query(min_length=1)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
):
    return await wordpress.search_plugins(search, page=page, per_page=per_page)


@router.post(
    "/upload",
    response_model=PluginRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        **CommonResponses.BAD_REQUEST,
        **CommonResponses.CONFLICT,
        **CommonResponses.BAD_GATEWAY,
    },
)
async def upload_plugin(data: PluginUpload, user: CurrentUserDep, session: SessionDep):
    """Add a plugin from an already stored ZIP; metadata comes from its header."""
    header = await parse_plugin_zip(data.file_url)
    return service.add_uploaded_plugin(
        session, user, header, data.file_url, data.team_id
    )


@router.post(
    "/wordpress",
    response_model=PluginRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        **CommonResponses.NOT_FOUND,
        **CommonResponses.CONFLICT,
        **CommonResponses.BAD_GATEWAY,
    },
)
async def add_wordpress_plugin(
    data: WordPressPluginAdd, user: CurrentUserDep, session: SessionDep
):
    info = await wordpress.get_plugin_info(data.slug)
    return service.add_wordpress_plugin(session, user, info, data.team_id)


@router.get(
    "/{plugin_id}", response_model=PluginRead, responses={**CommonResponses.NOT_FOUND}
)
async def get_plugin(plugin_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_plugin_for_user(session, plugin_id, user)


@router.post(
    "/{plugin_id}/versions",
    response_model=PluginRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def add_version(
    plugin_id: uuid.UUID,
    data: VersionCreate,
    user: CurrentUserDep,
    session: SessionDep,
):
    plugin = service.get_plugin_for_user(session, plugin_id, user)
    return service.add_version(session, plugin, user, data)


@router.post(
    "/{plugin_id}/install",
    response_model=InstallReport,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def install_plugin(
    plugin_id: uuid.UUID,
    data: InstallRequest,
    user: CurrentUserDep,
    session: SessionDep,
    connector: ConnectorDep,
):
    """Install a version on several sites; each site reports its own outcome."""
    plugin = service.get_plugin_for_user(session, plugin_id, user)
    return await service.install_on_sites(session, plugin, user, data, connector)


@router.post(
    "/{plugin_id}/sites/{site_id}/toggle",
    response_model=PluginRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_GATEWAY},
)
async def toggle_plugin_on_site(
    plugin_id: uuid.UUID,
    site_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    connector: ConnectorDep,
):
    plugin = service.get_plugin_for_user(session, plugin_id, user)
    return await service.toggle_on_site(session, plugin, user, site_id, connector)


@router.delete(
    "/{plugin_id}/sites/{site_id}",
    response_model=PluginRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_GATEWAY},
)
async def uninstall_plugin_from_site(
    plugin_id: uuid.UUID,
    site_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    connector: ConnectorDep,
):
    plugin = service.get_plugin_for_user(session, plugin_id, user)
    return await service.uninstall_from_site(session, plugin, user, site_id, connector)


@router.delete(
    "/{plugin_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_plugin(plugin_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    plugin = service.get_plugin_for_user(session, plugin_id, user)
    service.delete_plugin(session, plugin, user)
