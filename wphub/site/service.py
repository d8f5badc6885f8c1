"""Site domain service."""

import asyncio
import logging
import uuid

from sqlmodel import Session, col, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.connector.client import ConnectorClient
from wphub.connector.exceptions import ConnectorError
from wphub.connector.schemas import ConnectionCheck, PluginListResult
from wphub.core.mixins import utc_now
from wphub.db.commit import commit_or_rollback
from wphub.ownership.access import (
    can_manage,
    is_visible_to,
    resolve_new_owner,
    visible_rows,
)
from wphub.ownership.owner import set_owner
from wphub.plugin.models import Plugin
from wphub.plugin.schemas import InstalledOn
from wphub.plugin.versions import forget_site, installations_of, set_installations
from wphub.site.exceptions import SiteNotFoundError, SitePermissionError
from wphub.site.models import ConnectionStatus, Site
from wphub.site.schemas import SiteCreate, SiteUpdate, SyncFailure, SyncReport
from wphub.team.service import user_team_ids
from wphub.user.models import User

logger = logging.getLogger(__name__)


def accessible_sites(session: Session, user: User) -> list[Site]:
    """Sites owned by the user, by the user's teams, or shared with those teams."""
    sites = visible_rows(session, Site, user, user_team_ids(session, user))
    return sorted(sites, key=lambda s: s.created_at, reverse=True)


def list_all_sites(session: Session) -> list[Site]:
    return list(session.exec(select(Site).order_by(col(Site.created_at).desc())).all())


def get_site(session: Session, site_id: uuid.UUID) -> Site:
    site = session.get(Site, site_id)
    if site is None:
        raise SiteNotFoundError()
    return site


def get_site_for_user(session: Session, site_id: uuid.UUID, user: User) -> Site:
    """Load a site the user may see; sites they cannot see are reported missing."""
    site = get_site(session, site_id)
    if not is_visible_to(site, user, user_team_ids(session, user)):
        raise SiteNotFoundError()
    return site


def get_manageable_site(session: Session, site_id: uuid.UUID, user: User) -> Site:
    site = get_site_for_user(session, site_id, user)
    if not can_manage(session, site, user):
        raise SitePermissionError()
    return site


def create_site(session: Session, user: User, data: SiteCreate) -> Site:
    owner = resolve_new_owner(session, user, data.team_id)
    site = Site(
        name=data.name,
        url=str(data.url).rstrip("/"),
        created_by=user.email,
    )
    set_owner(site, owner)
    session.add(site)
    log_activity(
        session,
        user_email=user.email,
        action=f"Added site: {site.name}",
        entity_type=EntityType.site,
        entity_id=site.id,
    )
    commit_or_rollback(session, "create site")
    session.refresh(site)
    return site


def update_site(session: Session, site: Site, user: User, data: SiteUpdate) -> Site:
    if not can_manage(session, site, user):
        raise SitePermissionError()
    if data.name is not None:
        site.name = data.name
    if data.url is not None:
        site.url = str(data.url).rstrip("/")
    if data.shared_with_teams is not None:
        site.shared_with_teams = sorted({str(t) for t in data.shared_with_teams})
    session.add(site)
    log_activity(
        session,
        user_email=user.email,
        action=f"Updated site: {site.name}",
        entity_type=EntityType.site,
        entity_id=site.id,
    )
    commit_or_rollback(session, "update site")
    session.refresh(site)
    return site


def detach_site_from_plugins(session: Session, site_id: uuid.UUID) -> int:
    """Drop ``site_id`` from every plugin's ``installed_on``; returns plugins touched."""
    touched = 0
    for plugin in session.exec(select(Plugin)).all():
        if forget_site(plugin, site_id):
            session.add(plugin)
            touched += 1
    return touched


def delete_site(session: Session, site: Site, user: User) -> None:
    if not can_manage(session, site, user):
        raise SitePermissionError()
    detach_site_from_plugins(session, site.id)
    log_activity(
        session,
        user_email=user.email,
        action=f"Deleted site: {site.name}",
        entity_type=EntityType.site,
        entity_id=site.id,
    )
    session.delete(site)
    commit_or_rollback(session, "delete site")
    logger.info("Site %s deleted", site.id, extra={"site_id": str(site.id)})


async def test_connection(
    session: Session, site: Site, connector: ConnectorClient
) -> ConnectionCheck:
    """Ask the site's connector for a handshake and store the outcome.

    An unreachable or misconfigured site is not an API error: the site is
    marked ``error`` and the failure is returned in the result.
    """
    try:
        result = await connector.test_connection(site)
    except ConnectorError as e:
        site.connection_status = ConnectionStatus.error
        check = ConnectionCheck(success=False, error=e.message)
    else:
        site.connection_status = ConnectionStatus.active
        site.wp_version = result.wp_version
        check = ConnectionCheck(success=True, wp_version=result.wp_version)

    site.connection_checked_at = utc_now()
    session.add(site)
    commit_or_rollback(session, "store connection status")
    session.refresh(site)
    return check


def apply_remote_plugins(
    session: Session, site: Site, remote: PluginListResult
) -> int:
    """Rewrite this site's ``installed_on`` entries in the owner's library.

    Library plugins whose slug is installed on the site get a fresh entry;
    the others lose any entry they had for it. Returns plugins changed.
    """
    by_slug = {p.slug: p for p in remote.plugins}
    now = utc_now()
    library = session.exec(
        select(Plugin)
        .where(Plugin.owner_type == site.owner_type)
        .where(Plugin.owner_id == site.owner_id)
    ).all()

    changed = 0
    for plugin in library:
        current = installations_of(plugin)
        others = [i for i in current if i.site_id != site.id]
        previous = next((i for i in current if i.site_id == site.id), None)
        installed = by_slug.get(plugin.slug)
        if installed is None:
            updated = others
        else:
            updated = [
                *others,
                InstalledOn(
                    site_id=site.id,
                    version=installed.version,
                    is_active=installed.is_active,
                    installed_at=previous.installed_at if previous else now,
                ),
            ]
        if updated != current:
            set_installations(plugin, updated)
            session.add(plugin)
            changed += 1
    return changed


async def sync_all_sites(
    session: Session, admin: User, connector: ConnectorClient
) -> SyncReport:
    """Refresh installation records of every site from its connector.

    Sites are queried concurrently; one failing site does not stop the rest.
    """
    sites = list(session.exec(select(Site)).all())
    results = await asyncio.gather(
        *(connector.list_plugins(site) for site in sites), return_exceptions=True
    )

    report = SyncReport()
    for site, result in zip(sites, results, strict=True):
        if isinstance(result, ConnectorError):
            logger.warning(
                "Plugin sync failed: %s", result.message, extra={"site_id": str(site.id)}
            )
            report.failures.append(SyncFailure(site_id=site.id, error=result.message))
            continue
        if isinstance(result, BaseException):
            raise result
        report.plugins_updated += apply_remote_plugins(session, site, result)
        report.sites_synced += 1

    log_activity(
        session,
        user_email=admin.email,
        action="Synced plugins from all sites",
        entity_type=EntityType.connector,
        details=f"{report.sites_synced} synced, {len(report.failures)} failed",
    )
    commit_or_rollback(session, "sync site plugins")
    logger.info(
        "Plugin sync finished: %d synced, %d failed",
        report.sites_synced,
        len(report.failures),
    )
    return report

