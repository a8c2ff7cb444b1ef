import os
import unittest
from unittest.mock import patch

from aiohttp import web

from src.config import Settings
from src.interfaces.api import SERVICE_KEY
from src.main import build_app


class TestSettings(unittest.TestCase):
    def test_defaults_without_environment(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()

        self.assertIsNone(settings.github_token)
        self.assertEqual(settings.github_api_url, "https://api.github.com")
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.log_level, "INFO")

    def test_reads_environment(self) -> None:
        env = {"GITHUB_TOKEN": "ghp_test", "PORT": "9000", "LOG_LEVEL": "debug", "HOST": "127.0.0.1"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.github_token, "ghp_test")
        self.assertEqual(settings.port, 9000)
        self.assertEqual(settings.host, "127.0.0.1")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_empty_token_counts_as_missing(self) -> None:
        with patch.dict(os.environ, {"GITHUB_TOKEN": ""}, clear=True):
            self.assertIsNone(Settings.from_env().github_token)


class TestBuildApp(unittest.TestCase):
    def test_token_is_injected_into_client(self) -> None:
        app = build_app(Settings(github_token="ghp_test"))

        self.assertIsInstance(app, web.Application)
        client = app[SERVICE_KEY].github_client
        self.assertTrue(client.has_credentials)
        self.assertEqual(client.headers["Authorization"], "Bearer ghp_test")

    def test_missing_token_builds_app_without_credentials(self) -> None:
        app = build_app(Settings())

        self.assertFalse(app[SERVICE_KEY].github_client.has_credentials)
