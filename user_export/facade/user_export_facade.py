"""
User Export Facade

This facade orchestrates a single Active Directory user export: it turns an
ExportRequest into a directory search, filters and orders the returned
records, and writes them as a CSV file into the export tree.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional

from ..models.export_request import ExportRequest, ExportResult, SearchSpec
from ..services.activity_filter import DEFAULT_CUTOFF_DAYS, ActivityFilter, build_activity_filter
from ..services.ou_resolver import is_direct_member
from ..services.search_scope_builder import build_search_spec
from ..writers.csv_writer import ensure_directory, write_csv

logger = logging.getLogger(__name__)

EXPORTS_FOLDER = "Exports"
FILE_TIMESTAMP_FORMAT = "%Y%m%d%H%M"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _creation_sort_key(record: Mapping[str, Any]):
    created = record.get("Created")
    if not isinstance(created, datetime):
        return (0, _OLDEST)
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (1, created)


class UserExportFacade:
    """
    Export Active Directory users of an organizational unit to CSV.

    The directory session is passed in rather than created here, so any
    object exposing search_user_records(search_base, scope, search_filter,
    attributes) works: the LDAPAdapter in production, a fake in tests.
    """

    def __init__(
        self,
        directory,
        export_root: str,
        cutoff_days: int = DEFAULT_CUTOFF_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the export facade.

        Args:
            directory: Directory session providing search_user_records()
            export_root: Installation root; files go to <root>/Exports/<OU>/
            cutoff_days: Activity window for active-only exports
            clock: Callable returning the current local time (defaults to datetime.now)
        """
        self.directory = directory
        self.export_root = export_root
        self.cutoff_days = cutoff_days
        self.clock = clock or datetime.now

        logger.debug(f"User export facade initialized (export root: {export_root})")

    def get_export_directory(self, request: ExportRequest) -> str:
        return os.path.join(
            self.export_root, EXPORTS_FOLDER, request.organization_unit_folder
        )

    def get_export_filename(self, request: ExportRequest, timestamp: datetime) -> str:
        """Log<Verbosity>-<Active|All>Users-<yyyyMMddHHmm>.csv"""
        return (
            f"Log{request.verbosity.tag}-{request.activity_tag}Users-"
            f"{timestamp.strftime(FILE_TIMESTAMP_FORMAT)}.csv"
        )

    def derive_search_spec(self, request: ExportRequest, now: datetime) -> SearchSpec:
        """Search base, scope, filter and activity predicate for a request at a given time."""
        activity_filter = build_activity_filter(
            request.only_active,
            cutoff_days=self.cutoff_days,
            now=now.astimezone(timezone.utc),
        )
        return build_search_spec(request, activity_filter)

    def query_directory(self, search_spec: SearchSpec) -> List[Mapping[str, Any]]:
        """Query the directory for the users of a search spec, fetching every attribute."""
        logger.info(
            f"Querying {search_spec.search_base} "
            f"(scope: {search_spec.scope.name}, "
            f"active only: {search_spec.activity_filter is not None})"
        )
        records = self.directory.search_user_records(
            search_base=search_spec.search_base,
            scope=search_spec.scope.value,
            search_filter=search_spec.search_filter,
            attributes=search_spec.attributes,
        )
        logger.info(f"Directory returned {len(records)} user records")
        return records

    def filter_records(
        self,
        request: ExportRequest,
        records: List[Mapping[str, Any]],
        activity_filter: Optional[ActivityFilter] = None,
    ) -> List[Mapping[str, Any]]:
        """
        Keep the records an export should contain, ordered by creation time.

        Records failing the activity predicate are dropped, as are records
        outside the requested unit itself unless nested units were requested.
        """
        if activity_filter is not None:
            records = [record for record in records if activity_filter.matches(record)]
            logger.info(f"{len(records)} records pass {activity_filter!r}")

        if not request.include_nested:
            records = [
                record
                for record in records
                if is_direct_member(record, request.organization_unit)
            ]
            logger.info(
                f"{len(records)} records sit directly in '{request.organization_unit}'"
            )

        return sorted(records, key=_creation_sort_key)

    def export(self, request: ExportRequest) -> ExportResult:
        """
        Run an export and write the CSV file.

        The clock is read once; the file name and the activity cutoff share
        that instant. Directory and filesystem errors are not caught.

        Args:
            request: The export request

        Returns:
            ExportResult: Output path, columns and row counts
        """
        started_at = self.clock()
        search_spec = self.derive_search_spec(request, started_at)

        export_dir = ensure_directory(self.get_export_directory(request))
        path = os.path.join(export_dir, self.get_export_filename(request, started_at))
        logger.info(f"Exporting '{request.organization_unit}' users to {path}")

        fetched = self.query_directory(search_spec)
        records = self.filter_records(request, fetched, search_spec.activity_filter)
        columns = request.verbosity.columns_for(records)
        row_count = write_csv(path, records, columns)

        logger.info(f"✅ Export complete: {row_count} users written")
        return ExportResult(
            path=path,
            columns=columns,
            row_count=row_count,
            fetched_count=len(fetched),
        )
