"""Tests for site plugin sync."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlmodel import Session, select

from wphub.activity.models import ActivityLog, EntityType
from wphub.connector.exceptions import ConnectorError
from wphub.connector.schemas import PluginListResult, RemotePlugin
from wphub.ownership.owner import TeamOwner, UserOwner
from wphub.plugin.schemas import InstalledOn
from wphub.plugin.versions import installations_of, record_installation
from wphub.site.service import apply_remote_plugins, sync_all_sites
from wphub.user.models import User


def _remote(*plugins: tuple[str, str, bool]) -> PluginListResult:
    return PluginListResult(
        success=True,
        plugins=[
            RemotePlugin(name=slug.title(), slug=slug, version=version, is_active=active)
            for slug, version, active in plugins
        ],
        total=len(plugins),
    )


def test_apply_remote_plugins_records_installed_library_plugins(
    session: Session, test_user: User, make_site, make_plugin
):
    owner = UserOwner(test_user.id)
    site = make_site(owner)
    seo = make_plugin(owner)
    cache = make_plugin(owner, slug="cache-boost", name="Cache Boost")

    changed = apply_remote_plugins(
        session, site, _remote(("seo-pack", "1.0.0", True), ("unknown", "2.0", False))
    )

    assert changed == 1
    [entry] = installations_of(seo)
    assert entry.site_id == site.id
    assert entry.version == "1.0.0"
    assert entry.is_active is True
    assert entry.installed_at is not None
    assert installations_of(cache) == []


def test_apply_remote_plugins_drops_uninstalled_entry(
    session: Session, test_user: User, make_site, make_plugin
):
    owner = UserOwner(test_user.id)
    site = make_site(owner)
    plugin = make_plugin(owner)
    record_installation(plugin, InstalledOn(site_id=site.id, version="1.0.0"))

    changed = apply_remote_plugins(session, site, _remote())

    assert changed == 1
    assert installations_of(plugin) == []


def test_apply_remote_plugins_ignores_other_libraries(
    session: Session, test_user: User, other_user: User, make_site, make_plugin
):
    site = make_site(UserOwner(test_user.id))
    foreign = make_plugin(UserOwner(other_user.id))

    changed = apply_remote_plugins(session, site, _remote(("seo-pack", "1.0.0", True)))

    assert changed == 0
    assert installations_of(foreign) == []


@pytest.mark.asyncio
async def test_sync_all_sites_reports_failing_site(
    session: Session,
    admin_user: User,
    test_user: User,
    make_team,
    make_site,
    make_plugin,
    mock_connector: MagicMock,
):
    team = make_team(test_user)
    healthy = make_site(UserOwner(test_user.id), name="Healthy")
    broken = make_site(TeamOwner(team.id), name="Broken", url="https://broken.example.com")
    plugin = make_plugin(UserOwner(test_user.id))

    async def list_plugins(site):
        if site.id == broken.id:
            raise ConnectorError("Could not reach https://broken.example.com")
        return _remote(("seo-pack", "1.0.0", False))

    mock_connector.list_plugins = AsyncMock(side_effect=list_plugins)

    report = await sync_all_sites(session, admin_user, mock_connector)

    assert report.sites_synced == 1
    assert report.plugins_updated == 1
    assert [f.site_id for f in report.failures] == [broken.id]
    assert "broken.example.com" in report.failures[0].error

    session.refresh(plugin)
    assert [i.site_id for i in installations_of(plugin)] == [healthy.id]

    entry = session.exec(
        select(ActivityLog).where(ActivityLog.entity_type == EntityType.connector)
    ).one()
    assert entry.user_email == admin_user.email


@pytest.mark.asyncio
async def test_sync_all_sites_propagates_unexpected_errors(
    session: Session, admin_user: User, test_user: User, make_site, mock_connector
):
    make_site(UserOwner(test_user.id))
    mock_connector.list_plugins = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await sync_all_sites(session, admin_user, mock_connector)
