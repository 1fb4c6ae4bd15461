#!/usr/bin/env python3
"""
Active Directory User Export

Exports the user accounts of one organizational unit to a CSV file under
<export root>/Exports/<OrganizationUnit>/.

Connection settings come from the environment (or a .env file):
AD_SERVER, AD_USER, AD_PASSWORD, AD_KEYRING_SERVICE, AD_PORT, AD_USE_SSL,
AD_PAGE_SIZE, EXPORT_ROOT and EXPORT_CUTOFF_DAYS.

Usage:
    export-ad-users --domain corp.example.com --organization-unit Managers \\
        --only-active-users --log-verbosity Normal
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from active_directory.adapters.ldap_adapter import LDAPAdapter
from user_export.config import ExportConfig
from user_export.facade.user_export_facade import EXPORTS_FOLDER, UserExportFacade
from user_export.models.export_request import ExportRequest
from user_export.services.search_scope_builder import build_search_base

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export Active Directory users of an organizational unit to CSV"
    )
    parser.add_argument(
        "--domain",
        required=True,
        help="DNS domain, e.g. corp.example.com",
    )
    parser.add_argument(
        "--organization-unit",
        required=True,
        help="Name of the organizational unit to export",
    )
    parser.add_argument(
        "--only-active-users",
        action="store_true",
        help="Only export enabled users that logged on within the cutoff window",
    )
    parser.add_argument(
        "--search-sub-org-units",
        action="store_true",
        help="Include users of nested organizational units",
    )
    parser.add_argument(
        "--log-verbosity",
        default="Normal",
        help="All, Verbose, Normal, Minimal or a comma-separated attribute list (default: Normal)",
    )
    parser.add_argument(
        "--export-root",
        default=None,
        help="Directory under which Exports/ is created (default: EXPORT_ROOT or cwd)",
    )
    parser.add_argument(
        "--cutoff-days",
        type=int,
        default=None,
        help="Activity window in days for --only-active-users (default: 180)",
    )
    parser.add_argument(
        "--test-connection",
        action="store_true",
        help="Verify the directory connection before exporting",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def configure_logging(export_root: str, debug: bool = False) -> None:
    log_dir = os.path.join(export_root, EXPORTS_FOLDER, "logs")
    os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(os.path.join(log_dir, "export_ad_users.log")),
            logging.StreamHandler(sys.stdout),
        ],
        force=True,  # Override any existing configuration
    )


def build_request(args: argparse.Namespace) -> ExportRequest:
    return ExportRequest.from_arguments(
        domain=args.domain,
        organization_unit=args.organization_unit,
        only_active=args.only_active_users,
        include_nested=args.search_sub_org_units,
        verbosity=args.log_verbosity,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the user export from the command line.
    """
    args = parse_args(argv)

    # Load environment variables
    load_dotenv()

    export_root = args.export_root or ExportConfig.get_export_root()

    try:
        configure_logging(export_root, args.debug)

        request = build_request(args)
        cutoff_days = (
            args.cutoff_days
            if args.cutoff_days is not None
            else ExportConfig.get_cutoff_days()
        )

        ldap_config = ExportConfig.get_ldap_config(
            request.domain,
            search_base=build_search_base(request.domain, request.organization_unit),
        )
        directory = LDAPAdapter(ldap_config)

        if args.test_connection and not directory.test_connection():
            raise ConnectionError(f"Could not connect to {directory.server_hostname}")

        logger.info("=" * 80)
        logger.info("🚀 Starting Active Directory user export")
        logger.info(f"   Domain: {request.domain}")
        logger.info(f"   Organization Unit: {request.organization_unit}")
        logger.info(f"   Include Nested: {request.include_nested}")
        logger.info(f"   Active Only: {request.only_active}")
        logger.info(f"   Verbosity: {request.verbosity.tag}")
        logger.info("=" * 80)

        facade = UserExportFacade(directory, export_root, cutoff_days=cutoff_days)
        result = facade.export(request)

        print("\n" + "=" * 80)
        print("📊 AD USER EXPORT SUMMARY")
        print("=" * 80)
        print(f"Output File:         {result.path}")
        print(f"Records Fetched:     {result.fetched_count:>6,}")
        print(f"Records Exported:    {result.row_count:>6,}")
        print(f"Columns:             {len(result.columns):>6,}")
        print("=" * 80)

        return 0

    except Exception as e:
        logger.error(f"❌ User export failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
