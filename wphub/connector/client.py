"""Client for the connector plugin running on managed sites."""

import logging
from typing import Annotated, Any

import httpx
from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError

from wphub.connector.exceptions import ConnectorAuthError, ConnectorError
from wphub.connector.generator import CONNECTOR_NAMESPACE
from wphub.connector.schemas import (
    ConnectionTestResult,
    ConnectorEndpoint,
    ConnectorResponse,
    PluginListResult,
    ToggleResult,
)
from wphub.core.http import get_connector_client
from wphub.core.retry import with_retry
from wphub.site.models import Site

logger = logging.getLogger(__name__)


def connector_url(site_url: str, endpoint: ConnectorEndpoint) -> str:
    return f"{site_url.rstrip('/')}/wp-json/{CONNECTOR_NAMESPACE}/{endpoint.value}"


class ConnectorClient:
    """Calls the connector REST routes of a site with its API key.

    Transport errors are retried once. A 401, a non-2xx status, an
    unparseable body or ``success: false`` raise ConnectorError.
    """

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def _call[R: ConnectorResponse](
        self,
        site: Site,
        endpoint: ConnectorEndpoint,
        response_model: type[R],
        **params: Any,
    ) -> R:
        url = connector_url(site.url, endpoint)
        payload = {"api_key": site.api_key, **params}
        log_extra = {"site_id": str(site.id), "path": endpoint.value}

        try:
            response = await with_retry(
                lambda: self._http.post(url, json=payload),
                attempts=2,
                exceptions=(httpx.TransportError,),
            )
        except httpx.TransportError as e:
            logger.warning("Connector unreachable: %s", e, extra=log_extra)
            raise ConnectorError(f"Could not reach {site.url}") from e

        if response.status_code == 401:
            raise ConnectorAuthError()
        if response.status_code >= 400:
            logger.warning(
                "Connector returned HTTP %s", response.status_code, extra=log_extra
            )
            raise ConnectorError(
                f"Connector returned HTTP {response.status_code} for {endpoint.value}"
            )

        try:
            result = response_model.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise ConnectorError("Connector returned an invalid response") from e

        if not result.success:
            raise ConnectorError(result.message or f"{endpoint.value} failed")
        return result

    async def test_connection(self, site: Site) -> ConnectionTestResult:
        return await self._call(
            site, ConnectorEndpoint.test_connection, ConnectionTestResult
        )

    async def list_plugins(self, site: Site) -> PluginListResult:
        return await self._call(site, ConnectorEndpoint.list_plugins, PluginListResult)

    async def install_plugin(
        self, site: Site, *, file_url: str, plugin_slug: str
    ) -> ConnectorResponse:
        return await self._call(
            site,
            ConnectorEndpoint.install_plugin,
            ConnectorResponse,
            file_url=file_url,
            plugin_slug=plugin_slug,
        )

    async def toggle_plugin(self, site: Site, *, plugin_slug: str) -> ToggleResult:
        return await self._call(
            site, ConnectorEndpoint.toggle_plugin, ToggleResult, plugin_slug=plugin_slug
        )

    async def uninstall_plugin(
        self, site: Site, *, plugin_slug: str
    ) -> ConnectorResponse:
        return await self._call(
            site,
            ConnectorEndpoint.uninstall_plugin,
            ConnectorResponse,
            plugin_slug=plugin_slug,
        )


def get_connector() -> ConnectorClient:
    """FastAPI dependency returning a client on the shared connection pool."""
    return ConnectorClient(get_connector_client())


ConnectorDep = Annotated[ConnectorClient, Depends(get_connector)]
