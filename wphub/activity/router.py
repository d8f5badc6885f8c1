"""Activity domain router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from wphub.activity import service
from wphub.activity.models import EntityType
from wphub.activity.schemas import ActivityRead
from wphub.auth.dependencies import CurrentUserDep, require_admin, require_auth
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep

router = APIRouter(
    prefix=Routes.ACTIVITY.prefix,
    tags=[Routes.ACTIVITY.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


@router.get("/me", response_model=list[ActivityRead])
async def my_activity(
    user: CurrentUserDep,
    session: SessionDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
):
    """The current user's latest actions, without connector housekeeping."""
    return service.recent_activity_for(session, user.email, limit=limit)


@router.get(
    "/", response_model=list[ActivityRead], dependencies=[Depends(require_admin)]
)
async def list_activity(
    session: SessionDep,
    entity_type: EntityType | None = None,
    entity_id: str | None = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Audit trail across the platform. Admin only."""
    return service.list_activity(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        limit=limit,
        offset=offset,
    )
