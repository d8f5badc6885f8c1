"""Tests for wphub/core/firebase.py."""

from unittest.mock import patch

import pytest

from wphub.core.settings import get_settings
from wphub.core.firebase import init_firebase


def test_init_firebase_skips_when_app_exists():
    with (
        patch("wphub.core.firebase.get_app", return_value="app"),
        patch("wphub.core.firebase.initialize_app") as mock_init,
    ):
        init_firebase()

    mock_init.assert_not_called()


def test_init_firebase_pins_project_id(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "wphub-test")
    get_settings.cache_clear()
    try:
        with (
            patch("wphub.core.firebase.get_app", side_effect=ValueError("no app")),
            patch("wphub.core.firebase.initialize_app") as mock_init,
        ):
            init_firebase()
    finally:
        get_settings.cache_clear()

    mock_init.assert_called_once_with(options={"projectId": "wphub-test"})


def test_init_firebase_without_project_id(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("FIREBASE_PROJECT_ID", raising=False)
    get_settings.cache_clear()
    try:
        with (
            patch("wphub.core.firebase.get_app", side_effect=ValueError("no app")),
            patch("wphub.core.firebase.initialize_app") as mock_init,
        ):
            init_firebase()
    finally:
        get_settings.cache_clear()

    mock_init.assert_called_once_with(options=None)
