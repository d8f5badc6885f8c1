"""Tests for plugin archive parsing."""

import io
import zipfile

import httpx
import pytest

from wphub.core.exceptions import ExternalServiceError
from wphub.plugin.exceptions import InvalidPluginArchiveError
from wphub.plugin.zip_parser import (
    parse_plugin_archive,
    parse_plugin_zip,
    read_plugin_header,
)

HELLO_HEADER = """<?php
/**
 * Plugin Name: Hello Dolly
 * Plugin URI: https://wordpress.org/plugins/hello-dolly/
 * Description: A tiny plugin. */
/*
 * Author: Matt Mullenweg
 * Version: 1.7.2
 * Author URI: http://ma.tt/
 */
"""


def _zip(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def test_read_plugin_header():
    header = read_plugin_header(HELLO_HEADER)

    assert header == {
        "name": "Hello Dolly",
        "version": "1.7.2",
        "description": "A tiny plugin.",
        "author": "Matt Mullenweg",
        "author_url": "http://ma.tt/",
    }


def test_read_plugin_header_missing_fields():
    header = read_plugin_header("<?php\n// Plugin Name: Bare\n")

    assert header["name"] == "Bare"
    assert header["version"] is None


def test_parse_archive_prefers_file_named_after_folder():
    data = _zip(
        {
            "hello-dolly/helpers.php": "<?php\n/* Plugin Name: Not This One */",
            "hello-dolly/hello-dolly.php": HELLO_HEADER,
            "hello-dolly/readme.txt": "=== Hello Dolly ===",
        }
    )

    header = parse_plugin_archive(data)

    assert header.slug == "hello-dolly"
    assert header.name == "Hello Dolly"
    assert header.version == "1.7.2"


def test_parse_archive_root_file_uses_stem_as_slug():
    header = parse_plugin_archive(_zip({"hello.php": HELLO_HEADER}))

    assert header.slug == "hello"


def test_parse_archive_ignores_nested_and_macosx_files():
    data = _zip(
        {
            "__MACOSX/seo/seo.php": HELLO_HEADER,
            "seo/includes/deep.php": HELLO_HEADER,
            "seo/seo.php": "<?php\n// no header here\n",
        }
    )

    with pytest.raises(InvalidPluginArchiveError):
        parse_plugin_archive(data)


def test_parse_archive_rejects_non_zip():
    with pytest.raises(InvalidPluginArchiveError) as exc_info:
        parse_plugin_archive(b"not a zip")

    assert exc_info.value.message == "File is not a valid ZIP archive"


@pytest.mark.asyncio
async def test_parse_plugin_zip_downloads_archive(monkeypatch: pytest.MonkeyPatch):
    data = _zip({"hello-dolly/hello-dolly.php": HELLO_HEADER})

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://files.example.com/hello.zip"
        return httpx.Response(200, content=data)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("wphub.plugin.zip_parser.get_wordpress_client", lambda: client)

    header = await parse_plugin_zip("https://files.example.com/hello.zip")

    assert header.slug == "hello-dolly"


@pytest.mark.asyncio
async def test_parse_plugin_zip_download_failure(monkeypatch: pytest.MonkeyPatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("wphub.plugin.zip_parser.get_wordpress_client", lambda: client)

    with pytest.raises(ExternalServiceError):
        await parse_plugin_zip("https://files.example.com/missing.zip")
