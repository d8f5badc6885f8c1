"""Tests for the connector HTTP client."""

import json

import httpx
import pytest

from wphub.connector.client import ConnectorClient, connector_url
from wphub.connector.exceptions import ConnectorAuthError, ConnectorError
from wphub.connector.schemas import ConnectorEndpoint
from wphub.site.models import Site


def _site() -> Site:
    return Site(name="Shop", url="https://shop.example.com/", api_key="key-123")


def _client(handler) -> ConnectorClient:
    return ConnectorClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_connector_url():
    assert (
        connector_url("https://shop.example.com/", ConnectorEndpoint.list_plugins)
        == "https://shop.example.com/wp-json/wphub/v1/listPlugins"
    )


@pytest.mark.asyncio
async def test_test_connection_sends_api_key():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(
            200,
            json={"success": True, "wp_version": "6.6.2", "plugins_count": 12},
        )

    result = await _client(handler).test_connection(_site())

    assert result.wp_version == "6.6.2"
    assert result.plugins_count == 12
    [request] = captured
    assert request.method == "POST"
    assert str(request.url) == "https://shop.example.com/wp-json/wphub/v1/testConnection"
    assert json.loads(request.content) == {"api_key": "key-123"}


@pytest.mark.asyncio
async def test_install_plugin_sends_params():
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "slug": "seo-pack"})

    await _client(handler).install_plugin(
        _site(), file_url="https://downloads.example.com/seo.zip", plugin_slug="seo-pack"
    )

    assert captured == [
        {
            "api_key": "key-123",
            "file_url": "https://downloads.example.com/seo.zip",
            "plugin_slug": "seo-pack",
        }
    ]


@pytest.mark.asyncio
async def test_list_plugins_parses_remote_plugins():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "success": True,
                "plugins": [
                    {
                        "name": "SEO Pack",
                        "slug": "seo-pack",
                        "version": "1.2.0",
                        "status": "active",
                        "is_active": True,
                        "plugin_file": "seo-pack/seo-pack.php",
                    }
                ],
                "total": 1,
            },
        )

    result = await _client(handler).list_plugins(_site())

    assert [(p.slug, p.version, p.is_active) for p in result.plugins] == [
        ("seo-pack", "1.2.0", True)
    ]


@pytest.mark.asyncio
async def test_unauthorized_raises_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"code": "invalid_api_key"})

    with pytest.raises(ConnectorAuthError):
        await _client(handler).test_connection(_site())


@pytest.mark.asyncio
async def test_server_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Fatal error")

    with pytest.raises(ConnectorError) as exc_info:
        await _client(handler).list_plugins(_site())

    assert "HTTP 500" in exc_info.value.message


@pytest.mark.asyncio
async def test_success_false_raises_with_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "message": "Plugin not found"})

    with pytest.raises(ConnectorError) as exc_info:
        await _client(handler).toggle_plugin(_site(), plugin_slug="missing")

    assert exc_info.value.message == "Plugin not found"


@pytest.mark.asyncio
async def test_invalid_json_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(ConnectorError) as exc_info:
        await _client(handler).test_connection(_site())

    assert exc_info.value.message == "Connector returned an invalid response"


@pytest.mark.asyncio
async def test_transport_error_is_retried_once():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise httpx.ConnectError("connection refused")
        return httpx.Response(200, json={"success": True})

    result = await _client(handler).uninstall_plugin(_site(), plugin_slug="seo-pack")

    assert result.success is True
    assert calls == 2


@pytest.mark.asyncio
async def test_unreachable_site_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ConnectorError) as exc_info:
        await _client(handler).test_connection(_site())

    assert exc_info.value.message == "Could not reach https://shop.example.com/"
