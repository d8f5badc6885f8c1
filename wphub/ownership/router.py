"""Platform tools router: orphan scans, cleanups and ownership transfer.

Admin only.
"""

from fastapi import APIRouter, Depends

from wphub.auth.dependencies import AdminUserDep, require_admin
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep
from wphub.ownership import service
from wphub.ownership.schemas import (
    CleanupReport,
    CorruptVersionRead,
    OrphanCleanupRequest,
    OrphanRead,
    TransferRequest,
    TransferResult,
)

router = APIRouter(
    prefix=Routes.PLATFORM_TOOLS.prefix,
    tags=[Routes.PLATFORM_TOOLS.tag],
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


@router.get("/orphans/sites", response_model=list[OrphanRead])
async def scan_orphan_sites(session: SessionDep):
    return [
        OrphanRead.model_validate(site, from_attributes=True)
        for site in service.find_orphan_sites(session)
    ]


@router.get("/orphans/plugins", response_model=list[OrphanRead])
async def scan_orphan_plugins(session: SessionDep):
    return [
        OrphanRead.model_validate(plugin, from_attributes=True)
        for plugin in service.find_orphan_plugins(session)
    ]


@router.get("/orphans/versions", response_model=list[CorruptVersionRead])
async def scan_corrupt_versions(session: SessionDep):
    """Plugin versions that have no download URL."""
    return service.find_corrupt_versions(session)


@router.post(
    "/orphans/sites/cleanup",
    response_model=CleanupReport,
    responses={**CommonResponses.NOT_FOUND},
)
async def cleanup_orphan_sites(
    admin: AdminUserDep,
    session: SessionDep,
    request: OrphanCleanupRequest | None = None,
):
    return service.cleanup_orphan_sites(
        session, admin, request or OrphanCleanupRequest()
    )


@router.post(
    "/orphans/plugins/cleanup",
    response_model=CleanupReport,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def cleanup_orphan_plugins(
    admin: AdminUserDep,
    session: SessionDep,
    request: OrphanCleanupRequest | None = None,
):
    return service.cleanup_orphan_plugins(
        session, admin, request or OrphanCleanupRequest()
    )


@router.post("/orphans/versions/cleanup", response_model=CleanupReport)
async def cleanup_corrupt_versions(admin: AdminUserDep, session: SessionDep):
    return service.cleanup_corrupt_versions(session, admin)


@router.post(
    "/transfer",
    response_model=TransferResult,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def transfer_ownership(
    data: TransferRequest, admin: AdminUserDep, session: SessionDep
):
    """Move a site or plugin to another existing user or team."""
    return service.transfer_ownership(
        session, admin, data.entity_type, data.entity_id, data.to_owner()
    )
