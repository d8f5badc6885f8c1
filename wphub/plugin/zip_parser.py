"""Read the plugin header out of a WordPress plugin ZIP archive.

WordPress recognises a plugin by a comment block in a PHP file at the top
of the plugin folder::

    /**
     * Plugin Name: Hello Dolly
     * Version: 1.7.2
     */

Only the first 8 KiB of a file are scanned, as WordPress does.
"""

import io
import logging
import re
import zipfile
from pathlib import PurePosixPath

import httpx

from wphub.core.exceptions import ExternalServiceError
from wphub.core.http import get_wordpress_client
from wphub.plugin.exceptions import InvalidPluginArchiveError
from wphub.plugin.schemas import PluginHeader

logger = logging.getLogger(__name__)

HEADER_SCAN_BYTES = 8192

HEADER_FIELDS = {
    "name": "Plugin Name",
    "version": "Version",
    "description": "Description",
    "author": "Author",
    "author_url": "Author URI",
}


def _header_value(source: str, field: str) -> str | None:
    pattern = re.compile(
        rf"^[ \t/*#@]*{re.escape(field)}:(.*)$", re.MULTILINE | re.IGNORECASE
    )
    match = pattern.search(source)
    if match is None:
        return None
    value = re.sub(r"\s*(?:\*/|\?>).*$", "", match.group(1)).strip()
    return value or None


def read_plugin_header(source: str) -> dict[str, str | None]:
    return {key: _header_value(source, field) for key, field in HEADER_FIELDS.items()}


def _candidates(names: list[str]) -> list[PurePosixPath]:
    """PHP files at the archive root or directly inside a top-level folder.

    Files named after their folder are tried first.
    """
    paths = []
    for name in names:
        path = PurePosixPath(name)
        if path.suffix.lower() != ".php" or path.parts[0] == "__MACOSX":
            continue
        if len(path.parts) > 2:
            continue
        paths.append(path)

    def rank(path: PurePosixPath) -> tuple[int, str]:
        named_after_folder = len(path.parts) == 2 and path.stem == path.parts[0]
        return (0 if named_after_folder else 1, str(path))

    return sorted(paths, key=rank)


def _slug_for(path: PurePosixPath) -> str:
    return path.parts[0] if len(path.parts) == 2 else path.stem


def parse_plugin_archive(data: bytes) -> PluginHeader:
    """Find the main plugin file in a ZIP and return its header.

    Raises:
        InvalidPluginArchiveError: not a ZIP, or no file carries a
            ``Plugin Name`` header
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise InvalidPluginArchiveError("File is not a valid ZIP archive") from e

    with archive:
        for path in _candidates(archive.namelist()):
            with archive.open(str(path)) as fh:
                source = fh.read(HEADER_SCAN_BYTES).decode("utf-8", errors="replace")
            header = read_plugin_header(source)
            if header["name"]:
                return PluginHeader(slug=_slug_for(path), **header)

    raise InvalidPluginArchiveError()


async def parse_plugin_zip(file_url: str) -> PluginHeader:
    """Download a stored plugin ZIP and parse its header."""
    client = get_wordpress_client()
    try:
        response = await client.get(file_url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Plugin archive download failed: %s", e)
        raise ExternalServiceError("Could not download plugin archive") from e
    return parse_plugin_archive(response.content)
