"""Configuration loading and validation tests."""

import os
import unittest
from unittest.mock import patch

from memkv.config import LogLevel, MemKVConfig


class ConfigFromEnvTest(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = MemKVConfig.from_env()
        self.assertEqual(config.host, "0.0.0.0")
        self.assertEqual(config.http_port, 8080)
        self.assertEqual(config.api_key, "")
        self.assertEqual(config.log_level, LogLevel.INFO)
        self.assertTrue(config.metrics_enabled)
        self.assertEqual(config.shutdown_timeout_secs, 5.0)

    @patch.dict(os.environ, {
        "MEMKV_HOST": "127.0.0.1",
        "MEMKV_HTTP_PORT": "9000",
        "MEMKV_API_KEY": "secret",
        "MEMKV_LOG_LEVEL": "debug",
        "MEMKV_METRICS_ENABLED": "off",
        "MEMKV_SHUTDOWN_TIMEOUT_SECS": "2.5",
    }, clear=True)
    def test_overrides(self):
        config = MemKVConfig.from_env()
        self.assertEqual(config.host, "127.0.0.1")
        self.assertEqual(config.http_port, 9000)
        self.assertEqual(config.api_key, "secret")
        self.assertEqual(config.log_level, LogLevel.DEBUG)
        self.assertFalse(config.metrics_enabled)
        self.assertEqual(config.shutdown_timeout_secs, 2.5)

    @patch.dict(os.environ, {
        "MEMKV_HTTP_PORT": "eighty",
        "MEMKV_LOG_LEVEL": "verbose",
        "MEMKV_SHUTDOWN_TIMEOUT_SECS": "soon",
    }, clear=True)
    def test_malformed_values_fall_back_to_defaults(self):
        config = MemKVConfig.from_env()
        self.assertEqual(config.http_port, 8080)
        self.assertEqual(config.log_level, LogLevel.INFO)
        self.assertEqual(config.shutdown_timeout_secs, 5.0)


class ConfigValidateTest(unittest.TestCase):

    def test_valid(self):
        self.assertTrue(MemKVConfig(api_key="secret").validate())

    def test_invalid_values(self):
        for config in (
            MemKVConfig(api_key="secret", http_port=80),
            MemKVConfig(api_key="secret", http_port=70000),
            MemKVConfig(api_key=""),
            MemKVConfig(api_key="secret", shutdown_timeout_secs=0),
        ):
            with self.subTest(config=config):
                with self.assertRaises(ValueError):
                    config.validate()

    def test_to_dict_masks_api_key(self):
        exported = MemKVConfig(api_key="secret").to_dict()
        self.assertEqual(exported["api_key"], "***")
        self.assertNotIn("secret", str(MemKVConfig(api_key="secret")))


if __name__ == "__main__":
    unittest.main()
