"""Health probes for monitoring and load balancers.

``/health`` reports whether the database answers and whether the hub schema
has been migrated into it. Any failing probe turns the response into a 503.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from wphub.core.constants import Routes
from wphub.core.deps import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.HEALTH.prefix, tags=[Routes.HEALTH.tag])

PROBES = {
    "database": "SELECT 1",
    "schema": "SELECT 1 FROM sites LIMIT 1",
}


@router.get("")
async def health(session: SessionDep):
    checks: dict[str, str] = {}
    for name, query in PROBES.items():
        try:
            session.exec(text(query))
            checks[name] = "ok"
        except SQLAlchemyError:
            logger.exception("Health probe %s failed", name)
            session.rollback()
            checks[name] = "error"

    if all(result == "ok" for result in checks.values()):
        return {"status": "ok", **checks}
    return JSONResponse(status_code=503, content={"status": "unhealthy", **checks})
