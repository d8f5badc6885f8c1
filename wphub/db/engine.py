import logging
from collections.abc import Generator

from sqlmodel import Session, create_engine

from wphub.core.settings import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()

connect_args: dict[str, object] = {}
if _settings.database_url.startswith("sqlite"):
    # Required for SQLite when used with FastAPI across threads.
    connect_args = {"check_same_thread": False}

engine = create_engine(
    _settings.database_url,
    echo=False,
    connect_args=connect_args,
    pool_pre_ping=True,
)


def get_session() -> Generator[Session, None, None]:
    """Yield a session; anything left uncommitted by a failed request is rolled back."""
    with Session(engine) as session:
        try:
            yield session
        except Exception:
            logger.debug("Rolling back session after request failure")
            session.rollback()
            raise
