import logging
import secrets

from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request

from wphub.core.settings import get_settings

logger = logging.getLogger(__name__)


class AdminAuth(AuthenticationBackend):
    """SQLAdmin auth using Starlette sessions.

    The back-office login is a single configured account, separate from the
    Firebase users of the API.
    """

    def __init__(self) -> None:
        # SQLAdmin uses this secret for its session middleware; it must be stable.
        settings = get_settings()
        super().__init__(secret_key=settings.session_secret_key)

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = str(form.get("username", form.get("email", "")))
        password = str(form.get("password", ""))

        settings = get_settings()
        ok = secrets.compare_digest(
            username.strip(), settings.admin_username
        ) and secrets.compare_digest(password, settings.admin_password)
        if ok:
            request.session["admin_user"] = username
        else:
            logger.warning("Failed back-office login for %r", username)
        return ok

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return bool(request.session.get("admin_user"))
