import inspect
import os
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

# wphub.db.engine reads settings at import time.
os.environ.setdefault("ENV_NAME", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin")

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from wphub.auth.dependencies import get_current_user  # noqa: E402
from wphub.auth.service import (  # noqa: E402
    FirebaseAuthService,
    TokenClaims,
    get_firebase_auth_service,
)
from wphub.connector.client import ConnectorClient, get_connector  # noqa: E402
from wphub.connector.schemas import (  # noqa: E402
    ConnectionTestResult,
    ConnectorResponse,
    PluginListResult,
)
from wphub.core.mixins import utc_now  # noqa: E402
from wphub.core.settings import Settings, get_settings  # noqa: E402
from wphub.db.engine import get_session  # noqa: E402
from wphub.main import app  # noqa: E402
from wphub.ownership.owner import Owner, set_owner  # noqa: E402
from wphub.plugin.models import Plugin  # noqa: E402
from wphub.plugin.versions import append_version  # noqa: E402
from wphub.site.models import Site  # noqa: E402
from wphub.team.membership import set_members  # noqa: E402
from wphub.team.models import MemberStatus, Team, TeamRole  # noqa: E402
from wphub.team.schemas import TeamMember  # noqa: E402
from wphub.user.models import User, UserRole, UserStatus  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


@pytest.fixture(autouse=True)
def no_outgoing_email(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Keep invite emails from reaching Resend."""
    sender = MagicMock()
    monkeypatch.setattr("wphub.team.service.send_team_invite_email", sender)
    return sender


@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


def make_user(
    session: Session,
    email: str,
    *,
    full_name: str = "",
    role: UserRole = UserRole.user,
    status: UserStatus = UserStatus.active,
) -> User:
    user = User(
        external_id=f"uid-{email}",
        email=email,
        full_name=full_name,
        role=role,
        status=status,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session):
    """Create a test user in the database."""
    return make_user(session, "test@example.com", full_name="Test User")


@pytest.fixture(name="other_user")
def other_user_fixture(session: Session):
    return make_user(session, "other@example.com", full_name="Other User")


@pytest.fixture(name="admin_user")
def admin_user_fixture(session: Session):
    return make_user(
        session, "admin@example.com", full_name="Admin User", role=UserRole.admin
    )


@pytest.fixture(name="inactive_user")
def inactive_user_fixture(session: Session):
    """Create an inactive test user."""
    return make_user(
        session,
        "inactive@example.com",
        full_name="Inactive User",
        status=UserStatus.inactive,
    )


@pytest.fixture(name="make_team")
def make_team_fixture(session: Session) -> Callable[..., Team]:
    """Create a team; ``members`` are (user, role, status) triples besides the owner."""

    def _make(
        owner: User,
        *,
        name: str = "Agency",
        members: tuple[tuple[User, TeamRole, MemberStatus], ...] = (),
    ) -> Team:
        team = Team(name=name, owner_id=owner.id, created_by=owner.email)
        set_members(
            team,
            [
                TeamMember(
                    user_id=owner.id,
                    email=owner.email,
                    team_role_id=TeamRole.owner,
                    status=MemberStatus.active,
                    joined_at=utc_now(),
                ),
                *(
                    TeamMember(
                        user_id=user.id, email=user.email, team_role_id=role, status=status
                    )
                    for user, role, status in members
                ),
            ],
        )
        session.add(team)
        session.commit()
        session.refresh(team)
        return team

    return _make


@pytest.fixture(name="make_site")
def make_site_fixture(session: Session) -> Callable[..., Site]:
    def _make(
        owner: Owner,
        *,
        name: str = "Shop",
        url: str = "https://shop.example.com",
        shared_with_teams: list[str] | None = None,
    ) -> Site:
        site = Site(name=name, url=url, shared_with_teams=shared_with_teams or [])
        set_owner(site, owner)
        session.add(site)
        session.commit()
        session.refresh(site)
        return site

    return _make


@pytest.fixture(name="make_plugin")
def make_plugin_fixture(session: Session) -> Callable[..., Plugin]:
    """Create a plugin; ``versions`` are (version, download_url) pairs, oldest first."""

    def _make(
        owner: Owner,
        *,
        slug: str = "seo-pack",
        name: str = "SEO Pack",
        versions: tuple[tuple[str, str], ...] = (
            ("1.0.0", "https://downloads.example.com/seo-pack.1.0.0.zip"),
        ),
    ) -> Plugin:
        plugin = Plugin(name=name, slug=slug)
        set_owner(plugin, owner)
        for version, url in versions:
            append_version(plugin, version, url)
        session.add(plugin)
        session.commit()
        session.refresh(plugin)
        return plugin

    return _make


@pytest.fixture(name="mock_firebase_auth")
def mock_firebase_auth_fixture():
    """Create a mock FirebaseAuthService."""
    mock_service = MagicMock(spec=FirebaseAuthService)
    # Default mock behaviors
    mock_service.verify_session_cookie.return_value = TokenClaims(uid="test-uid")
    mock_service.verify_id_token.return_value = TokenClaims(uid="test-uid")
    return mock_service


@pytest.fixture(name="mock_connector")
def mock_connector_fixture():
    """A ConnectorClient whose sites all answer successfully."""
    connector = MagicMock(spec=ConnectorClient)
    connector.test_connection = AsyncMock(
        return_value=ConnectionTestResult(
            success=True, wp_version="6.6.2", plugins_count=0
        )
    )
    connector.list_plugins = AsyncMock(
        return_value=PluginListResult(success=True, plugins=[], total=0)
    )
    connector.install_plugin = AsyncMock(
        return_value=ConnectorResponse(success=True, message="Plugin installed")
    )
    connector.toggle_plugin = AsyncMock()
    connector.uninstall_plugin = AsyncMock()
    return connector


@pytest.fixture(name="mock_settings")
def mock_settings_fixture():
    """Create mock settings."""
    return Settings(
        env_name="test",
        database_url="sqlite://",
        session_secret_key="test-secret-key",
        admin_username="admin",
        admin_password="admin",
        session_expires_days=5,
        firebase_api_key="test-api-key",
    )


@pytest.fixture(name="login_as")
def login_as_fixture() -> Callable[[User], None]:
    """Switch the user the test client is authenticated as."""

    def _login_as(user: User) -> None:
        app.dependency_overrides[get_current_user] = lambda: user

    return _login_as


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    test_user: User,
    mock_firebase_auth: MagicMock,
    mock_connector: MagicMock,
    mock_settings: Settings,
    login_as: Callable[[User], None],
):
    """Create a test client with overridden dependencies."""

    def get_session_override():
        return session

    def get_firebase_auth_override():
        return mock_firebase_auth

    def get_connector_override():
        return mock_connector

    def get_settings_override():
        return mock_settings

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_firebase_auth_service] = get_firebase_auth_override
    app.dependency_overrides[get_connector] = get_connector_override
    app.dependency_overrides[get_settings] = get_settings_override
    login_as(test_user)

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="admin_client")
def admin_client_fixture(
    client: TestClient, admin_user: User, login_as: Callable[[User], None]
):
    """The same client, authenticated as a platform admin."""
    login_as(admin_user)
    return client


@pytest.fixture(name="unauthenticated_client")
def unauthenticated_client_fixture(
    session: Session,
    mock_firebase_auth: MagicMock,
    mock_settings: Settings,
):
    """Create a test client without auth override (for testing auth failures)."""

    def get_session_override():
        return session

    def get_firebase_auth_override():
        return mock_firebase_auth

    def get_settings_override():
        return mock_settings

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_firebase_auth_service] = get_firebase_auth_override
    app.dependency_overrides[get_settings] = get_settings_override

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
