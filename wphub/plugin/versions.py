"""Version list rules for plugins.

The list is ordered by creation; the newest entry is last and is the one
``latest_version`` points at. A version without a download URL is corrupt:
it can never be installed.
"""

import uuid
from collections.abc import Callable, Iterable
from datetime import datetime

from wphub.core.mixins import utc_now
from wphub.plugin.models import Plugin
from wphub.plugin.schemas import InstalledOn, PluginVersion


def versions_of(plugin: Plugin) -> list[PluginVersion]:
    return [PluginVersion.model_validate(raw) for raw in plugin.versions or []]


def latest_of(versions: list[PluginVersion]) -> str | None:
    return versions[-1].version if versions else None


def set_versions(plugin: Plugin, versions: Iterable[PluginVersion]) -> None:
    """Replace the version list and recompute ``latest_version``."""
    items = list(versions)
    plugin.versions = [v.model_dump(mode="json") for v in items]
    plugin.latest_version = latest_of(items)


def is_corrupt(version: PluginVersion) -> bool:
    return not (version.download_url or "").strip()


def find_version(plugin: Plugin, version: str) -> PluginVersion | None:
    for item in versions_of(plugin):
        if item.version == version:
            return item
    return None


def append_version(
    plugin: Plugin,
    version: str,
    download_url: str,
    *,
    created_at: datetime | None = None,
) -> PluginVersion:
    """Add a new newest version; re-adding an existing version string moves it last."""
    entry = PluginVersion(
        version=version,
        download_url=download_url,
        created_at=created_at or utc_now(),
    )
    remaining = [v for v in versions_of(plugin) if v.version != version]
    set_versions(plugin, [*remaining, entry])
    return entry


def remove_versions(
    plugin: Plugin, predicate: Callable[[PluginVersion], bool]
) -> list[PluginVersion]:
    """Drop matching versions, keep the rest in order, return what was dropped."""
    kept: list[PluginVersion] = []
    removed: list[PluginVersion] = []
    for item in versions_of(plugin):
        (removed if predicate(item) else kept).append(item)
    if removed:
        set_versions(plugin, kept)
    return removed


def installations_of(plugin: Plugin) -> list[InstalledOn]:
    return [InstalledOn.model_validate(raw) for raw in plugin.installed_on or []]


def set_installations(plugin: Plugin, installations: Iterable[InstalledOn]) -> None:
    plugin.installed_on = [i.model_dump(mode="json") for i in installations]


def record_installation(plugin: Plugin, installation: InstalledOn) -> None:
    """Insert or replace the installation entry for one site."""
    others = [i for i in installations_of(plugin) if i.site_id != installation.site_id]
    set_installations(plugin, [*others, installation])


def forget_site(plugin: Plugin, site_id: uuid.UUID) -> bool:
    """Remove a site's installation entry; returns whether one existed."""
    current = installations_of(plugin)
    remaining = [i for i in current if i.site_id != site_id]
    if len(remaining) == len(current):
        return False
    set_installations(plugin, remaining)
    return True
