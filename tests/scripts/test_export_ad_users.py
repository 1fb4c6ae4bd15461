import os
import unittest
from unittest.mock import MagicMock, patch

from scripts import export_ad_users
from user_export.models.attribute_selection import VerbosityLevel
from user_export.models.export_request import ExportResult


class TestExportAdUsersScript(unittest.TestCase):
    """Test cases for the export-ad-users command line entry point."""

    def setUp(self):
        """Patch out the directory, the facade and logging setup."""
        self.mock_adapter_cls = patch('scripts.export_ad_users.LDAPAdapter').start()
        self.mock_facade_cls = patch('scripts.export_ad_users.UserExportFacade').start()
        self.mock_configure_logging = patch('scripts.export_ad_users.configure_logging').start()
        patch('scripts.export_ad_users.load_dotenv').start()
        patch.dict(os.environ, {"AD_USER": "CORP\\svc_export"}, clear=True).start()

        self.mock_facade = MagicMock()
        self.mock_facade.export.return_value = ExportResult(
            path="/tmp/Exports/Managers/LogNormal-ActiveUsers-202406010930.csv",
            columns=["Name"],
            row_count=2,
            fetched_count=3,
        )
        self.mock_facade_cls.return_value = self.mock_facade

        self.base_args = [
            "--domain", "com.org.local",
            "--organization-unit", "Managers",
            "--export-root", "/tmp/export-root",
        ]

    def tearDown(self):
        """Clean up after each test."""
        patch.stopall()

    def test_parse_args_defaults(self):
        """Test default flag values."""
        args = export_ad_users.parse_args(self.base_args)

        self.assertFalse(args.only_active_users)
        self.assertFalse(args.search_sub_org_units)
        self.assertEqual(args.log_verbosity, "Normal")
        self.assertIsNone(args.cutoff_days)

    def test_build_request(self):
        """Test translation of arguments into an ExportRequest."""
        args = export_ad_users.parse_args(
            self.base_args + ["--only-active-users", "--search-sub-org-units", "--log-verbosity", "MINIMAL"]
        )
        request = export_ad_users.build_request(args)

        self.assertEqual(request.domain, "com.org.local")
        self.assertEqual(request.organization_unit, "Managers")
        self.assertTrue(request.only_active)
        self.assertTrue(request.include_nested)
        self.assertIs(request.verbosity.level, VerbosityLevel.MINIMAL)

    def test_build_request_delegates_to_from_arguments(self):
        """Test that the raw verbosity token is parsed by ExportRequest.from_arguments."""
        args = export_ad_users.parse_args(self.base_args + ["--log-verbosity", "mail, Name"])

        with patch('scripts.export_ad_users.ExportRequest.from_arguments') as mock_from_arguments:
            export_ad_users.build_request(args)

        mock_from_arguments.assert_called_once_with(
            domain="com.org.local",
            organization_unit="Managers",
            only_active=False,
            include_nested=False,
            verbosity="mail, Name",
        )

    def test_main_runs_export(self):
        """Test a successful run end to end through the mocks."""
        exit_code = export_ad_users.main(self.base_args + ["--only-active-users", "--cutoff-days", "90"])

        self.assertEqual(exit_code, 0)
        self.mock_configure_logging.assert_called_once_with("/tmp/export-root", False)

        ldap_config = self.mock_adapter_cls.call_args.args[0]
        self.assertEqual(ldap_config["server"], "com.org.local")
        self.assertEqual(ldap_config["search_base"], "OU=Managers,DC=com,DC=org,DC=local")
        self.assertEqual(ldap_config["user"], "CORP\\svc_export")

        self.mock_facade_cls.assert_called_once_with(
            self.mock_adapter_cls.return_value, "/tmp/export-root", cutoff_days=90
        )
        request = self.mock_facade.export.call_args.args[0]
        self.assertTrue(request.only_active)
        self.assertFalse(request.include_nested)
        self.mock_adapter_cls.return_value.test_connection.assert_not_called()

    def test_main_unknown_verbosity_fails(self):
        """Test that a mistyped verbosity keyword aborts the run."""
        exit_code = export_ad_users.main(self.base_args + ["--log-verbosity", "Normla"])

        self.assertEqual(exit_code, 1)
        self.mock_facade.export.assert_not_called()

    def test_main_missing_user_fails(self):
        """Test that missing LDAP credentials abort the run."""
        with patch.dict(os.environ, {}, clear=True):
            exit_code = export_ad_users.main(self.base_args)

        self.assertEqual(exit_code, 1)
        self.mock_adapter_cls.assert_not_called()

    def test_main_connection_check_failure(self):
        """Test that a failed connection check aborts before exporting."""
        self.mock_adapter_cls.return_value.test_connection.return_value = False

        exit_code = export_ad_users.main(self.base_args + ["--test-connection"])

        self.assertEqual(exit_code, 1)
        self.mock_facade.export.assert_not_called()

    def test_main_export_failure(self):
        """Test that export errors produce a non-zero exit code."""
        self.mock_facade.export.side_effect = OSError("disk full")

        self.assertEqual(export_ad_users.main(self.base_args), 1)


if __name__ == '__main__':
    unittest.main()
