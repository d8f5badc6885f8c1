"""Centralized dependency type aliases for FastAPI routes.

Authenticated-user aliases live in wphub.auth.dependencies; the ones here
have no dependency on the auth domain:
    from wphub.core.deps import SessionDep, SettingsDep
"""

from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from wphub.core.settings import Settings, get_settings
from wphub.db.engine import get_session

# Database session
SessionDep = Annotated[Session, Depends(get_session)]

# Application settings
SettingsDep = Annotated[Settings, Depends(get_settings)]
