"""Plugin domain service.

Library management (upload, wordpress.org import, versions) and fan-out
installation through site connectors.
"""

import asyncio
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.connector.client import ConnectorClient
from wphub.connector.exceptions import ConnectorError
from wphub.core.mixins import utc_now
from wphub.db.commit import commit_or_rollback
from wphub.ownership.access import (
    can_manage,
    is_visible_to,
    resolve_new_owner,
    visible_rows,
)
from wphub.ownership.owner import Owner, set_owner
from wphub.plugin.exceptions import (
    NoInstallableVersionError,
    PluginExistsError,
    PluginNotFoundError,
    PluginPermissionError,
    VersionNotFoundError,
)
from wphub.plugin.models import Plugin, PluginSource
from wphub.plugin.schemas import (
    InstalledOn,
    InstallReport,
    InstallRequest,
    PluginHeader,
    SiteInstallResult,
    VersionCreate,
    WordPressPlugin,
)
from wphub.plugin.versions import (
    append_version,
    find_version,
    forget_site,
    installations_of,
    is_corrupt,
    record_installation,
    versions_of,
)
from wphub.site.models import Site
from wphub.site.service import get_manageable_site
from wphub.team.service import user_team_ids
from wphub.user.models import User

logger = logging.getLogger(__name__)


def library_for(session: Session, user: User) -> list[Plugin]:
    """Plugins owned by the user or their teams, or shared with their teams."""
    plugins = visible_rows(session, Plugin, user, user_team_ids(session, user))
    return sorted(plugins, key=lambda p: p.updated_at, reverse=True)


def get_plugin_for_user(session: Session, plugin_id: uuid.UUID, user: User) -> Plugin:
    plugin = session.get(Plugin, plugin_id)
    if plugin is None or not is_visible_to(plugin, user, user_team_ids(session, user)):
        raise PluginNotFoundError()
    return plugin


def _require_manage(session: Session, plugin: Plugin, user: User) -> None:
    if not can_manage(session, plugin, user):
        raise PluginPermissionError()


def find_by_slug(session: Session, owner: Owner, slug: str) -> Plugin | None:
    return session.exec(
        select(Plugin)
        .where(Plugin.owner_type == owner.type)
        .where(Plugin.owner_id == owner.id)
        .where(Plugin.slug == slug)
    ).first()


def _add_to_library(
    session: Session,
    user: User,
    owner: Owner,
    plugin: Plugin,
    *,
    version: str | None,
    download_url: str,
    action: str,
) -> Plugin:
    """Insert a new library plugin, enforcing one slug per owner.

    The lookup gives a friendly error; the unique constraint catches a
    concurrent insert of the same slug.
    """
    if find_by_slug(session, owner, plugin.slug) is not None:
        raise PluginExistsError(plugin.name)

    set_owner(plugin, owner)
    plugin.created_by = user.email
    append_version(plugin, version or "1.0.0", download_url)
    session.add(plugin)
    log_activity(
        session,
        user_email=user.email,
        action=f"{action}: {plugin.name}",
        entity_type=EntityType.plugin,
        entity_id=plugin.id,
        details=f"Version {plugin.latest_version}",
    )
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise PluginExistsError(plugin.name) from e
    session.refresh(plugin)
    logger.info("Plugin %s added", plugin.slug, extra={"plugin_id": str(plugin.id)})
    return plugin


def add_uploaded_plugin(
    session: Session,
    user: User,
    header: PluginHeader,
    file_url: str,
    team_id: uuid.UUID | None = None,
) -> Plugin:
    owner = resolve_new_owner(session, user, team_id)
    plugin = Plugin(
        name=header.name,
        slug=header.slug,
        description=header.description,
        author=header.author,
        author_url=header.author_url,
        source=PluginSource.upload,
    )
    return _add_to_library(
        session,
        user,
        owner,
        plugin,
        version=header.version,
        download_url=file_url,
        action="Uploaded plugin",
    )


def add_wordpress_plugin(
    session: Session,
    user: User,
    info: WordPressPlugin,
    team_id: uuid.UUID | None = None,
) -> Plugin:
    owner = resolve_new_owner(session, user, team_id)
    plugin = Plugin(
        name=info.name,
        slug=info.slug,
        description=info.short_description or info.description,
        author=info.author,
        author_url=info.author_profile,
        source=PluginSource.wplibrary,
    )
    return _add_to_library(
        session,
        user,
        owner,
        plugin,
        version=info.version,
        download_url=info.download_url or "",
        action="Added plugin from WordPress library",
    )


def add_version(
    session: Session, plugin: Plugin, user: User, data: VersionCreate
) -> Plugin:
    _require_manage(session, plugin, user)
    append_version(plugin, data.version, data.download_url)
    session.add(plugin)
    log_activity(
        session,
        user_email=user.email,
        action=f"Added version {data.version} of plugin: {plugin.name}",
        entity_type=EntityType.plugin,
        entity_id=plugin.id,
    )
    commit_or_rollback(session, "add plugin version")
    session.refresh(plugin)
    return plugin


def delete_plugin(session: Session, plugin: Plugin, user: User) -> None:
    _require_manage(session, plugin, user)
    log_activity(
        session,
        user_email=user.email,
        action=f"Deleted plugin: {plugin.name}",
        entity_type=EntityType.plugin,
        entity_id=plugin.id,
    )
    session.delete(plugin)
    commit_or_rollback(session, "delete plugin")


async def install_on_sites(
    session: Session,
    plugin: Plugin,
    user: User,
    data: InstallRequest,
    connector: ConnectorClient,
) -> InstallReport:
    """Install one version of a plugin on several sites at once.

    Every site is tried; connector failures are reported per site and do not
    abort the others. Successful sites are recorded in ``installed_on``.
    """
    _require_manage(session, plugin, user)

    if data.version is None:
        installable = [v for v in versions_of(plugin) if not is_corrupt(v)]
        if not installable:
            raise NoInstallableVersionError()
        version = installable[-1]
    else:
        found = find_version(plugin, data.version)
        if found is None:
            raise VersionNotFoundError(data.version)
        if is_corrupt(found):
            raise NoInstallableVersionError(
                f"Version {found.version} has no download URL"
            )
        version = found

    sites: list[Site] = [
        get_manageable_site(session, site_id, user)
        for site_id in dict.fromkeys(data.site_ids)
    ]
    outcomes = await asyncio.gather(
        *(
            connector.install_plugin(
                site, file_url=version.download_url, plugin_slug=plugin.slug
            )
            for site in sites
        ),
        return_exceptions=True,
    )

    results: list[SiteInstallResult] = []
    now = utc_now()
    for site, outcome in zip(sites, outcomes, strict=True):
        if isinstance(outcome, ConnectorError):
            results.append(
                SiteInstallResult(site_id=site.id, success=False, error=outcome.message)
            )
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        record_installation(
            plugin,
            InstalledOn(
                site_id=site.id,
                version=version.version,
                is_active=False,
                installed_at=now,
            ),
        )
        results.append(SiteInstallResult(site_id=site.id, success=True))

    report = InstallReport(plugin_id=plugin.id, version=version.version, results=results)
    session.add(plugin)
    log_activity(
        session,
        user_email=user.email,
        action=f"Installed plugin {plugin.name} {version.version}",
        entity_type=EntityType.plugin,
        entity_id=plugin.id,
        details=f"{report.succeeded}/{len(results)} sites succeeded",
    )
    commit_or_rollback(session, "record plugin installation")
    session.refresh(plugin)
    return report


async def toggle_on_site(
    session: Session,
    plugin: Plugin,
    user: User,
    site_id: uuid.UUID,
    connector: ConnectorClient,
) -> Plugin:
    """Flip the plugin's activation on one site and record the new state."""
    _require_manage(session, plugin, user)
    site = get_manageable_site(session, site_id, user)

    result = await connector.toggle_plugin(site, plugin_slug=plugin.slug)
    is_active = result.new_status == "active"

    current = next(
        (i for i in installations_of(plugin) if i.site_id == site.id), None
    )
    if current is None:
        current = InstalledOn(site_id=site.id, installed_at=utc_now())
    record_installation(plugin, current.model_copy(update={"is_active": is_active}))
    session.add(plugin)
    log_activity(
        session,
        user_email=user.email,
        action=f"{'Activated' if is_active else 'Deactivated'} plugin: {plugin.name}",
        entity_type=EntityType.plugin,
        entity_id=plugin.id,
        details=f"site:{site.id}",
    )
    commit_or_rollback(session, "toggle plugin")
    session.refresh(plugin)
    return plugin


async def uninstall_from_site(
    session: Session,
    plugin: Plugin,
    user: User,
    site_id: uuid.UUID,
    connector: ConnectorClient,
) -> Plugin:
    """Remove the plugin from one site and drop that site's installation entry."""
    _require_manage(session, plugin, user)
    site = get_manageable_site(session, site_id, user)

    await connector.uninstall_plugin(site, plugin_slug=plugin.slug)

    forget_site(plugin, site.id)
    session.add(plugin)
    log_activity(
        session,
        user_email=user.email,
        action=f"Uninstalled plugin: {plugin.name}",
        entity_type=EntityType.plugin,
        entity_id=plugin.id,
        details=f"site:{site.id}",
    )
    commit_or_rollback(session, "uninstall plugin")
    session.refresh(plugin)
    return plugin
