"""Orphan detection, cleanup and ownership transfer for sites and plugins.

An entity is orphaned when no user or team matches its owner. Detection
loads the id sets of both tables once and checks every entity against them;
the platform has few enough users and teams for this to stay cheap.

Cleanups re-scan at execution time rather than trusting a list the client
saw earlier, and each one commits as a single transaction.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import assert_never

from sqlmodel import Session, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.core.exceptions import ValidationError
from wphub.db.commit import commit_or_rollback
from wphub.ownership.exceptions import OwnerNotFoundError
from wphub.ownership.owner import (
    Owner,
    TeamOwner,
    UserOwner,
    describe_owner,
    owner_of,
    set_owner,
)
from wphub.ownership.schemas import (
    CleanupAction,
    CleanupReport,
    CorruptVersionRead,
    OrphanCleanupRequest,
    OwnedEntityType,
    TransferResult,
)
from wphub.plugin.exceptions import PluginExistsError, PluginNotFoundError
from wphub.plugin.models import Plugin
from wphub.plugin.service import find_by_slug
from wphub.plugin.versions import is_corrupt, remove_versions, versions_of
from wphub.site.exceptions import SiteNotFoundError
from wphub.site.models import Site
from wphub.site.service import detach_site_from_plugins
from wphub.team.models import Team
from wphub.user.models import User

logger = logging.getLogger(__name__)

CORRUPT_REASON = "No download URL"


@dataclass(frozen=True)
class OwnerIndex:
    """Snapshot of every existing user and team id."""

    user_ids: frozenset[uuid.UUID]
    team_ids: frozenset[uuid.UUID]

    def contains(self, owner: Owner) -> bool:
        match owner:
            case UserOwner(id=owner_id):
                return owner_id in self.user_ids
            case TeamOwner(id=owner_id):
                return owner_id in self.team_ids
            case _:
                assert_never(owner)


def load_owner_index(session: Session) -> OwnerIndex:
    return OwnerIndex(
        user_ids=frozenset(session.exec(select(User.id)).all()),
        team_ids=frozenset(session.exec(select(Team.id)).all()),
    )


def is_orphaned(entity: Site | Plugin, index: OwnerIndex) -> bool:
    return not index.contains(owner_of(entity))


def find_orphan_sites(session: Session) -> list[Site]:
    index = load_owner_index(session)
    return [s for s in session.exec(select(Site)).all() if is_orphaned(s, index)]


def find_orphan_plugins(session: Session) -> list[Plugin]:
    index = load_owner_index(session)
    return [p for p in session.exec(select(Plugin)).all() if is_orphaned(p, index)]


def find_corrupt_versions(session: Session) -> list[CorruptVersionRead]:
    return [
        CorruptVersionRead(
            plugin_id=plugin.id,
            plugin_name=plugin.name,
            version=version.version,
            reason=CORRUPT_REASON,
        )
        for plugin in session.exec(select(Plugin)).all()
        for version in versions_of(plugin)
        if is_corrupt(version)
    ]


def owner_exists(session: Session, owner: Owner) -> bool:
    match owner:
        case UserOwner(id=owner_id):
            return session.get(User, owner_id) is not None
        case TeamOwner(id=owner_id):
            return session.get(Team, owner_id) is not None
        case _:
            assert_never(owner)


def _require_owner(session: Session, owner: Owner) -> None:
    if not owner_exists(session, owner):
        raise OwnerNotFoundError(describe_owner(owner))


def _stage_transfer(
    session: Session, admin: User, entity: Site | Plugin, target: Owner
) -> TransferResult:
    previous = owner_of(entity)
    if isinstance(entity, Plugin):
        existing = find_by_slug(session, target, entity.slug)
        if existing is not None and existing.id != entity.id:
            raise PluginExistsError(entity.name)
        entity_type = OwnedEntityType.plugin
    else:
        entity_type = OwnedEntityType.site

    set_owner(entity, target)
    session.add(entity)
    log_activity(
        session,
        user_email=admin.email,
        action=f"Transferred {entity_type.value} ownership: {entity.name}",
        entity_type=EntityType(entity_type.value),
        entity_id=entity.id,
        details=f"From {describe_owner(previous)} to {describe_owner(target)}",
    )
    return TransferResult(
        entity_type=entity_type,
        entity_id=entity.id,
        previous_owner=describe_owner(previous),
        new_owner=describe_owner(target),
    )


def transfer_ownership(
    session: Session,
    admin: User,
    entity_type: OwnedEntityType,
    entity_id: uuid.UUID,
    target: Owner,
) -> TransferResult:
    """Reassign a site or plugin to an existing user or team."""
    entity: Site | Plugin | None
    match entity_type:
        case OwnedEntityType.site:
            entity = session.get(Site, entity_id)
            if entity is None:
                raise SiteNotFoundError()
        case OwnedEntityType.plugin:
            entity = session.get(Plugin, entity_id)
            if entity is None:
                raise PluginNotFoundError()
        case _:
            assert_never(entity_type)

    _require_owner(session, target)
    result = _stage_transfer(session, admin, entity, target)
    commit_or_rollback(session, "transfer ownership")
    logger.info(
        "Ownership of %s %s transferred from %s to %s",
        entity_type.value,
        entity_id,
        result.previous_owner,
        result.new_owner,
        extra={"entity_type": entity_type.value, "entity_id": str(entity_id)},
    )
    return result


def _cleanup_orphans(
    session: Session,
    admin: User,
    orphans: list[Site] | list[Plugin],
    request: OrphanCleanupRequest,
    entity_type: EntityType,
) -> CleanupReport:
    report = CleanupReport()
    match request.action:
        case CleanupAction.delete:
            for entity in orphans:
                if isinstance(entity, Site):
                    detach_site_from_plugins(session, entity.id)
                log_activity(
                    session,
                    user_email=admin.email,
                    action=f"Deleted orphaned {entity_type.value}: {entity.name}",
                    entity_type=entity_type,
                    entity_id=entity.id,
                    details=describe_owner(owner_of(entity)),
                )
                session.delete(entity)
                report.deleted += 1
        case CleanupAction.transfer:
            if request.target is None:
                raise ValidationError("A transfer cleanup needs a target owner")
            target = request.target.to_owner()
            _require_owner(session, target)
            for entity in orphans:
                _stage_transfer(session, admin, entity, target)
                report.transferred += 1
        case _:
            assert_never(request.action)

    commit_or_rollback(session, f"clean up orphaned {entity_type.value}s")
    logger.info(
        "Orphaned %ss cleaned up: %d deleted, %d transferred",
        entity_type.value,
        report.deleted,
        report.transferred,
    )
    return report


def cleanup_orphan_sites(
    session: Session, admin: User, request: OrphanCleanupRequest
) -> CleanupReport:
    return _cleanup_orphans(
        session, admin, find_orphan_sites(session), request, EntityType.site
    )


def cleanup_orphan_plugins(
    session: Session, admin: User, request: OrphanCleanupRequest
) -> CleanupReport:
    return _cleanup_orphans(
        session, admin, find_orphan_plugins(session), request, EntityType.plugin
    )


def cleanup_corrupt_versions(session: Session, admin: User) -> CleanupReport:
    """Remove versions without a download URL and recompute ``latest_version``."""
    report = CleanupReport()
    for plugin in session.exec(select(Plugin)).all():
        removed = remove_versions(plugin, is_corrupt)
        if not removed:
            continue
        session.add(plugin)
        report.versions_removed += len(removed)
        log_activity(
            session,
            user_email=admin.email,
            action=f"Removed corrupt versions of plugin: {plugin.name}",
            entity_type=EntityType.plugin,
            entity_id=plugin.id,
            details=", ".join(v.version for v in removed),
        )
    commit_or_rollback(session, "clean up corrupt versions")
    logger.info("Corrupt versions removed: %d", report.versions_removed)
    return report
