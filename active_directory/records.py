"""
Directory record normalisation for Active Directory user entries.

LDAP hands back raw attributes (userAccountControl, whenCreated,
lastLogonTimestamp, ...). Administrators think in terms of the account
properties the AD management tools show (Enabled, Created, LastLogonDate,
LockedOut, ...), so every user entry is turned into a case-insensitive
record that carries both: the raw attributes untouched plus the derived
properties computed here.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from ldap3.utils.ciDict import CaseInsensitiveDict
from ldap3.utils.dn import parse_dn

logger = logging.getLogger(__name__)

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)
FILETIME_NEVER = 9223372036854775807

# Constructed attributes are never part of "*" and must be named explicitly
CONSTRUCTED_USER_ATTRIBUTES = ["canonicalName", "msDS-User-Account-Control-Computed"]

# userAccountControl flags
UAC_ACCOUNTDISABLE = 0x0002
UAC_LOCKOUT = 0x0010
UAC_PASSWD_NOTREQD = 0x0020
UAC_PASSWD_CANT_CHANGE = 0x0040
UAC_DONT_EXPIRE_PASSWORD = 0x10000
UAC_PASSWORD_EXPIRED = 0x800000


def first_value(value: Any) -> Any:
    """Collapse a single-element list to its element; empty lists become None."""
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        return value[0] if len(value) == 1 else list(value)
    return value


def windows_timestamp_to_datetime(timestamp: int) -> Optional[datetime]:
    """Convert Windows FILETIME to a UTC datetime."""
    if timestamp is None or timestamp == 0 or timestamp == FILETIME_NEVER:
        return None
    try:
        # Windows FILETIME is 100-nanosecond intervals since January 1, 1601
        return FILETIME_EPOCH + timedelta(microseconds=timestamp // 10)
    except (ValueError, OverflowError):
        return None


def datetime_to_windows_timestamp(value: datetime) -> int:
    """Convert a datetime to Windows FILETIME. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - FILETIME_EPOCH
    return (delta.days * 86400 + delta.seconds) * 10_000_000 + delta.microseconds * 10


def generalized_time_to_datetime(time_str: str) -> Optional[datetime]:
    """Convert LDAP Generalized Time (20240131120000.0Z) to a UTC datetime."""
    if not time_str:
        return None
    try:
        if time_str.endswith("Z"):
            time_str = time_str[:-1]
        if "." in time_str:
            parsed = datetime.strptime(time_str, "%Y%m%d%H%M%S.%f")
        else:
            parsed = datetime.strptime(time_str, "%Y%m%d%H%M%S")
        return parsed.replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce any of the timestamp shapes AD returns into an aware UTC datetime.

    ldap3 formats whenCreated and lastLogonTimestamp as datetimes when the
    schema is loaded, but without schema information they arrive as
    FILETIME integers or Generalized Time strings.
    """
    value = first_value(value)
    if value is None or isinstance(value, list):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        # ldap3 renders a zero FILETIME as 1601-01-01 and 0x7FFF... as datetime.max ("never")
        if value.year in (1601, 9999):
            return None
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, int):
        return windows_timestamp_to_datetime(value)
    if isinstance(value, str):
        value = value.strip()
        if value.isdigit() and len(value) > 14:
            return windows_timestamp_to_datetime(int(value))
        return generalized_time_to_datetime(value)
    return None


def safe_int(val, default=0):
    """Safely convert a value to int."""
    val = first_value(val)
    if val is None:
        return default
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


def parse_uac(uac, computed=None) -> Dict[str, bool]:
    """
    Derive account state flags from userAccountControl.

    Lockout and password expiry are only maintained by the DC in
    msDS-User-Account-Control-Computed; the static UAC bits are used when
    the computed value is unavailable.
    """
    if uac is None:
        return {}
    uac = safe_int(uac, 0)
    state = uac if computed is None else uac | safe_int(computed, 0)
    return {
        "Enabled": not bool(uac & UAC_ACCOUNTDISABLE),
        "LockedOut": bool(state & UAC_LOCKOUT),
        "PasswordExpired": bool(state & UAC_PASSWORD_EXPIRED),
        "PasswordNeverExpires": bool(uac & UAC_DONT_EXPIRE_PASSWORD),
        "PasswordNotRequired": bool(uac & UAC_PASSWD_NOTREQD),
        "CannotChangePassword": bool(uac & UAC_PASSWD_CANT_CHANGE),
    }


def dn_to_canonical_name(dn: str) -> str:
    """
    Convert a distinguished name to its canonical name.

    CN=Jane Doe,OU=Sales,OU=Corp,DC=corp,DC=local -> corp.local/Corp/Sales/Jane Doe
    """
    if not dn:
        return ""
    domain_labels = []
    path = []
    for attr, value, _separator in parse_dn(dn):
        if attr.upper() == "DC":
            domain_labels.append(value)
        else:
            path.append(value)
    path.reverse()
    return "/".join([".".join(domain_labels)] + path)


def to_directory_record(entry: Mapping[str, Any]) -> CaseInsensitiveDict:
    """
    Build a directory record from an LDAP entry dictionary.

    Args:
        entry: Dictionary with 'dn' plus LDAP attributes, as produced by
               LDAPAdapter.search()

    Returns:
        CaseInsensitiveDict: Raw attributes plus derived account properties
    """
    record = CaseInsensitiveDict()
    dn = entry.get("dn")
    for key, value in entry.items():
        if key == "dn":
            continue
        record[key] = value
    record["DistinguishedName"] = dn

    canonical_name = first_value(record.get("canonicalName"))
    if not canonical_name:
        canonical_name = dn_to_canonical_name(dn)
    record["CanonicalName"] = canonical_name

    record["Name"] = first_value(record.get("name")) or first_value(record.get("cn"))
    record["Created"] = to_datetime(record.get("whenCreated"))
    record["LastLogonDate"] = to_datetime(record.get("lastLogonTimestamp"))
    record["OtherName"] = first_value(record.get("middleName"))

    uac = record.get("userAccountControl")
    if uac is None:
        logger.debug(f"No userAccountControl on {dn}; account state left unset")
    for flag, state in parse_uac(
        uac, record.get("msDS-User-Account-Control-Computed")
    ).items():
        record[flag] = state

    return record
