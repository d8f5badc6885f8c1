"""HTTP client factory for external API calls.

Provides per-service HTTP clients with connection pooling, timeouts,
and proper resource management. Three upstreams are used:

- Firebase Identity Toolkit (password sign-in)
- connector plugins running on managed WordPress sites
- the public wordpress.org plugin directory API
"""

import httpx

from wphub.core.settings import get_settings

# Default timeout configuration (seconds)
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_WRITE_TIMEOUT = 10.0
DEFAULT_POOL_TIMEOUT = 5.0

# Module-level client storage for singleton pattern
_firebase_client: httpx.AsyncClient | None = None
_connector_client: httpx.AsyncClient | None = None
_wordpress_client: httpx.AsyncClient | None = None


def create_http_client(
    base_url: str = "",
    max_connections: int = 20,
    max_keepalive_connections: int = 10,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
    write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    pool_timeout: float = DEFAULT_POOL_TIMEOUT,
    follow_redirects: bool = False,
) -> httpx.AsyncClient:
    """Create a configured async HTTP client.

    Args:
        base_url: Base URL for all requests (empty string for none)
        max_connections: Maximum number of concurrent connections
        max_keepalive_connections: Maximum idle connections to keep alive
        connect_timeout: Timeout for establishing connection
        read_timeout: Timeout for reading response
        write_timeout: Timeout for sending request
        pool_timeout: Timeout for acquiring connection from pool
        follow_redirects: Whether redirects are followed automatically

    Returns:
        Configured httpx.AsyncClient instance
    """
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=write_timeout,
            pool=pool_timeout,
        ),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
        follow_redirects=follow_redirects,
    )


def get_firebase_client() -> httpx.AsyncClient:
    """Get singleton HTTP client for Firebase Identity Toolkit.

    Tuned for high concurrency authentication requests.
    """
    global _firebase_client
    if _firebase_client is None:
        _firebase_client = create_http_client(
            base_url="https://identitytoolkit.googleapis.com",
            max_connections=100,
            max_keepalive_connections=20,
        )
    return _firebase_client


def get_connector_client() -> httpx.AsyncClient:
    """Get singleton HTTP client for talking to managed sites.

    No base URL: every request targets a different WordPress site. Plugin
    installs can take a while on slow hosts, so the read timeout follows
    CONNECTOR_TIMEOUT_SECONDS.
    """
    global _connector_client
    if _connector_client is None:
        settings = get_settings()
        _connector_client = create_http_client(
            max_connections=50,
            max_keepalive_connections=10,
            read_timeout=settings.connector_timeout_seconds,
            write_timeout=settings.connector_timeout_seconds,
            follow_redirects=True,
        )
    return _connector_client


def get_wordpress_client() -> httpx.AsyncClient:
    """Get singleton HTTP client for the wordpress.org plugin API and ZIP downloads."""
    global _wordpress_client
    if _wordpress_client is None:
        settings = get_settings()
        _wordpress_client = create_http_client(
            base_url=settings.wordpress_api_url,
            read_timeout=30.0,
            follow_redirects=True,
        )
    return _wordpress_client


async def close_http_clients() -> None:
    """Close every singleton HTTP client and release resources.

    Called during application shutdown.
    """
    global _firebase_client, _connector_client, _wordpress_client
    for client in (_firebase_client, _connector_client, _wordpress_client):
        if client is not None:
            await client.aclose()
    _firebase_client = None
    _connector_client = None
    _wordpress_client = None
