from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqladmin import Admin

from wphub.admin.auth import AdminAuth
from wphub.admin.views import ADMIN_VIEWS
from wphub.core.cors import add_cors_middleware
from wphub.core.email import init_resend
from wphub.core.exception_handlers import register_exception_handlers
from wphub.core.firebase import init_firebase
from wphub.core.logging import configure_logging
from wphub.core.request_logging import add_request_logging_middleware
from wphub.db.engine import engine
from wphub.router import api_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_firebase()
    init_resend()
    yield
    # Cleanup HTTP clients
    from wphub.core.http import close_http_clients

    await close_http_clients()


app = FastAPI(title="WP Plugin Hub", version="0.1.0", lifespan=lifespan)

app.include_router(api_router)

add_request_logging_middleware(app)
add_cors_middleware(app)
register_exception_handlers(app)

# Mount SQLAdmin UI at /admin (SQLAdmin enables sessions via auth backend secret)
admin = Admin(
    app=app,
    engine=engine,
    authentication_backend=AdminAuth(),
)
for view in ADMIN_VIEWS:
    admin.add_view(view)
