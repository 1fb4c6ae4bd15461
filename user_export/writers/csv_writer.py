import logging
import os
from datetime import datetime
from typing import Any, List, Mapping, Sequence

import pandas as pd
from ldap3.protocol.formatters.formatters import format_sid, format_uuid_le

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
MULTI_VALUE_SEPARATOR = ";"


def ensure_directory(path: str) -> str:
    """Create a directory (and parents) if it does not exist yet."""
    os.makedirs(path, exist_ok=True)
    return path


def sanitize_value(value: Any, column: str = "") -> Any:
    """
    Turn an LDAP attribute value into something a CSV cell can hold.

    Multi-valued attributes are joined with ';', datetimes are rendered
    in local-independent ISO-like form and binary SIDs / GUIDs are
    converted to their string forms.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return MULTI_VALUE_SEPARATOR.join(str(sanitize_value(item, column)) for item in value)
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, bytes):
        if column.lower() == "objectsid":
            return format_sid(value)
        if column.lower() == "objectguid":
            return format_uuid_le(value)
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def project_records(
    records: Sequence[Mapping[str, Any]], columns: List[str]
) -> List[List[Any]]:
    """Project records onto columns; attributes a record lacks become empty cells."""
    rows = []
    for record in records:
        rows.append([sanitize_value(record.get(column), column) for column in columns])
    return rows


def write_csv(path: str, records: Sequence[Mapping[str, Any]], columns: List[str]) -> int:
    """
    Write records to a UTF-8 CSV file with a header row.

    The file is overwritten if it exists. Errors (permissions, disk full)
    propagate to the caller.

    Args:
        path: Output file path
        records: Records to write, in output order
        columns: Column names, also used as the header row

    Returns:
        int: Number of data rows written
    """
    df = pd.DataFrame(project_records(records, columns), columns=columns)
    df.to_csv(path, index=False, encoding="utf-8", mode="w")
    logger.info(f"Wrote {len(df)} rows to {path}")
    return len(df)
