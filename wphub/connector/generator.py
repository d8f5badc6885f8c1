"""Render the connector plugin installed on managed WordPress sites."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from wphub.connector.schemas import ConnectorEndpoint

CONNECTOR_NAMESPACE = "wphub/v1"
CONNECTOR_VERSION = "1.1.0"
CONNECTOR_PLUGIN_SLUG = "wp-plugin-hub-connector"

ConnectorTemplatesDir = Path(__file__).parent / "templates"


def php_string(value: str) -> str:
    """Quote a value as a single-quoted PHP string literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# PHP output: HTML autoescaping would corrupt the source.
JinjaConnectorEnv = Environment(
    loader=FileSystemLoader(str(ConnectorTemplatesDir)),
    autoescape=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)
JinjaConnectorEnv.filters["php_string"] = php_string


def generate_connector_code(api_key: str, hub_url: str) -> str:
    """Return the PHP source of the connector plugin for one site.

    The site's API key and the hub URL are baked into the plugin; every
    request to the connector must carry the same key.
    """
    template = JinjaConnectorEnv.get_template("connector.php.j2")
    return template.render(
        api_key=api_key,
        hub_url=hub_url,
        version=CONNECTOR_VERSION,
        namespace=CONNECTOR_NAMESPACE,
        plugin_slug=CONNECTOR_PLUGIN_SLUG,
        routes=[(endpoint.value, endpoint.callback) for endpoint in ConnectorEndpoint],
    )


def connector_filename() -> str:
    return f"{CONNECTOR_PLUGIN_SLUG}.php"
