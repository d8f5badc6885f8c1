"""Connector domain schemas.

Wire shapes of the REST API exposed by the connector plugin on each managed
site (``POST /wp-json/wphub/v1/<endpoint>``).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ConnectorEndpoint(str, Enum):
    """Connector routes and the PHP callback that serves each one."""

    test_connection = "testConnection"
    list_plugins = "listPlugins"
    get_installed_plugins = "getInstalledPlugins"
    install_plugin = "installPlugin"
    toggle_plugin = "togglePlugin"
    uninstall_plugin = "uninstallPlugin"
    download_plugin = "downloadPlugin"
    update_self = "updateSelf"

    @property
    def callback(self) -> str:
        return self.name


class ConnectorResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool
    message: str | None = None


class ConnectionTestResult(ConnectorResponse):
    wp_version: str | None = None
    plugins_count: int | None = None
    site_url: str | None = None


class RemotePlugin(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    slug: str
    version: str
    is_active: bool = False


class PluginListResult(ConnectorResponse):
    plugins: list[RemotePlugin] = []
    total: int = 0


class ToggleResult(ConnectorResponse):
    new_status: str | None = None


class ConnectionCheck(BaseModel):
    """Outcome of a connection test as reported to API clients."""

    success: bool
    wp_version: str | None = None
    error: str | None = None
