import os
import unittest
from unittest.mock import patch

from user_export.config import ExportConfig
from user_export.exceptions import ConfigurationError


class TestExportConfig(unittest.TestCase):
    """Test cases for environment-driven configuration."""

    @patch.dict(os.environ, {"AD_USER": "CORP\\svc_export"}, clear=True)
    def test_ldap_config_defaults(self):
        """Test defaults derived from the domain."""
        config = ExportConfig.get_ldap_config("corp.example.com")

        self.assertEqual(config["server"], "corp.example.com")
        self.assertEqual(config["search_base"], "DC=corp,DC=example,DC=com")
        self.assertEqual(config["user"], "CORP\\svc_export")
        self.assertIsNone(config["password"])
        self.assertEqual(config["keyring_service"], "ldap_ad_export")
        self.assertEqual(config["port"], 636)
        self.assertTrue(config["use_ssl"])
        self.assertEqual(config["default_page_size"], 1000)

    @patch.dict(os.environ, {
        "AD_USER": "svc",
        "AD_SERVER": "dc01.corp.local",
        "AD_PASSWORD": "secret",
        "AD_USE_SSL": "false",
        "AD_PAGE_SIZE": "500",
    }, clear=True)
    def test_ldap_config_overrides(self):
        """Test values taken from the environment."""
        config = ExportConfig.get_ldap_config("corp.local", search_base="OU=Managers,DC=corp,DC=local")

        self.assertEqual(config["server"], "dc01.corp.local")
        self.assertEqual(config["search_base"], "OU=Managers,DC=corp,DC=local")
        self.assertEqual(config["password"], "secret")
        self.assertFalse(config["use_ssl"])
        self.assertEqual(config["port"], 389)
        self.assertEqual(config["default_page_size"], 500)

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_user(self):
        """Test that AD_USER is required."""
        with self.assertRaises(ConfigurationError):
            ExportConfig.get_ldap_config("corp.local")

    @patch.dict(os.environ, {"AD_USER": "svc", "AD_PORT": "ldaps"}, clear=True)
    def test_malformed_port(self):
        """Test that a non-numeric port is a configuration error."""
        with self.assertRaises(ConfigurationError):
            ExportConfig.get_ldap_config("corp.local")

    @patch.dict(os.environ, {"EXPORT_ROOT": "/srv/export", "EXPORT_CUTOFF_DAYS": "90"}, clear=True)
    def test_export_settings(self):
        """Test export root and cutoff window."""
        self.assertEqual(ExportConfig.get_export_root(), "/srv/export")
        self.assertEqual(ExportConfig.get_cutoff_days(), 90)

    @patch.dict(os.environ, {}, clear=True)
    def test_export_setting_defaults(self):
        """Test export defaults."""
        self.assertEqual(ExportConfig.get_export_root(), os.getcwd())
        self.assertEqual(ExportConfig.get_cutoff_days(), 180)


if __name__ == '__main__':
    unittest.main()
