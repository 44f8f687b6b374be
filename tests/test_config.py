import os
import tempfile
import unittest
from dataclasses import fields
from unittest import mock

from utils.config import DEFAULT_API_URL, Settings

ENV_KEYS = [
    "API_URL",
    "SESSION_DB",
    "REQUEST_TIMEOUT",
    "SEARCH_DEBOUNCE_MS",
    "PAGE_SIZE",
    "ORDERS_REFRESH_SECONDS",
    "DASHBOARD_REFRESH_SECONDS",
]


class SettingsTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.missing_env = os.path.join(self.temp_dir.name, "missing.env")
        clean = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
        self.env = mock.patch.dict(os.environ, clean, clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.temp_dir.cleanup()

    def test_defaults(self):
        settings = Settings.from_env(self.missing_env)

        self.assertEqual(settings.api_url, DEFAULT_API_URL)
        self.assertEqual(settings.page_size, 10)
        self.assertEqual(settings.debounce_delay, 0.3)

    def test_every_setting_comes_from_the_environment(self):
        self.assertEqual(
            {f.name for f in fields(Settings)},
            {
                "api_url",
                "session_db",
                "request_timeout",
                "debounce_delay",
                "page_size",
                "orders_refresh_interval",
                "dashboard_refresh_interval",
            },
        )

    def test_environment_overrides(self):
        os.environ.update(
            {
                "API_URL": "https://shop.example.com/",
                "SEARCH_DEBOUNCE_MS": "500",
                "PAGE_SIZE": "25",
                "ORDERS_REFRESH_SECONDS": "15",
            }
        )

        settings = Settings.from_env(self.missing_env)

        self.assertEqual(settings.api_url, "https://shop.example.com")
        self.assertEqual(settings.debounce_delay, 0.5)
        self.assertEqual(settings.page_size, 25)
        self.assertEqual(settings.orders_refresh_interval, 15.0)

    def test_bad_values_fall_back(self):
        os.environ.update({"PAGE_SIZE": "0", "REQUEST_TIMEOUT": "soon"})

        settings = Settings.from_env(self.missing_env)

        self.assertEqual(settings.page_size, 10)
        self.assertEqual(settings.request_timeout, 10.0)

    def test_dotenv_file_is_read(self):
        env_file = os.path.join(self.temp_dir.name, ".env")
        with open(env_file, "w") as f:
            f.write("API_URL=http://from-dotenv:4000\nPAGE_SIZE=5\n")

        settings = Settings.from_env(env_file)

        self.assertEqual(settings.api_url, "http://from-dotenv:4000")
        self.assertEqual(settings.page_size, 5)


if __name__ == "__main__":
    unittest.main()
