"""Client for the public wordpress.org plugin directory API."""

import logging
import re
from typing import Any

import httpx

from wphub.core.http import get_wordpress_client
from wphub.core.retry import with_retry
from wphub.plugin.exceptions import PluginNotFoundError, WordPressApiError
from wphub.plugin.schemas import WordPressPlugin, WordPressSearchResult

logger = logging.getLogger(__name__)

PLUGIN_INFO_PATH = "/plugins/info/1.2/"

_TAG_RE = re.compile(r"<[^>]+>")


def _strip_tags(value: str | None) -> str | None:
    if value is None:
        return None
    return _TAG_RE.sub("", value).strip()


def _to_plugin(raw: dict[str, Any]) -> WordPressPlugin:
    sections = raw.get("sections") or {}
    return WordPressPlugin(
        name=_strip_tags(raw.get("name")) or raw["slug"],
        slug=raw["slug"],
        version=raw.get("version"),
        author=_strip_tags(raw.get("author")),
        author_profile=raw.get("author_profile"),
        short_description=raw.get("short_description"),
        description=_strip_tags(sections.get("description"))
        or raw.get("short_description"),
        # wordpress.org rates 0-100.
        rating=raw.get("rating"),
        active_installs=raw.get("active_installs"),
        download_url=raw.get("download_link"),
    )


async def _query(params: dict[str, Any]) -> dict[str, Any]:
    client = get_wordpress_client()
    try:
        response = await with_retry(
            lambda: client.get(PLUGIN_INFO_PATH, params=params),
            exceptions=(httpx.TransportError,),
        )
    except httpx.TransportError as e:
        logger.warning("wordpress.org unreachable: %s", e)
        raise WordPressApiError() from e

    if response.status_code == 404:
        raise PluginNotFoundError("Plugin not found on wordpress.org")
    if response.status_code >= 400:
        logger.warning("wordpress.org returned HTTP %s", response.status_code)
        raise WordPressApiError(f"wordpress.org returned HTTP {response.status_code}")
    try:
        data = response.json()
    except ValueError as e:
        raise WordPressApiError("wordpress.org returned an invalid response") from e
    if isinstance(data, dict) and data.get("error"):
        raise PluginNotFoundError(f"wordpress.org: {data['error']}")
    return data


async def search_plugins(
    search: str, *, page: int = 1, per_page: int = 20
) -> WordPressSearchResult:
    data = await _query(
        {
            "action": "query_plugins",
            "request[search]": search,
            "request[page]": page,
            "request[per_page]": per_page,
        }
    )
    info = data.get("info") or {}
    return WordPressSearchResult(
        page=info.get("page", page),
        pages=info.get("pages", 0),
        results=info.get("results", 0),
        plugins=[_to_plugin(raw) for raw in data.get("plugins", [])],
    )


async def get_plugin_info(slug: str) -> WordPressPlugin:
    data = await _query({"action": "plugin_information", "request[slug]": slug})
    return _to_plugin(data)
