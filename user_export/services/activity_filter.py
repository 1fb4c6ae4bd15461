import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from active_directory.records import datetime_to_windows_timestamp, to_datetime

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF_DAYS = 180

ALL_USERS_FILTER = "(&(objectCategory=person)(objectClass=user))"
ENABLED_ACCOUNT_CLAUSE = "(!(userAccountControl:1.2.840.113556.1.4.803:=2))"


class ActivityFilter:
    """
    Predicate selecting enabled accounts with a recent logon.

    A record matches when Enabled is true and its last logon timestamp is
    strictly later than now minus cutoff_days.
    """

    def __init__(self, cutoff_days: int = DEFAULT_CUTOFF_DAYS, now: Optional[datetime] = None):
        if cutoff_days < 0:
            raise ValueError("cutoff_days must not be negative")
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        self.cutoff_days = cutoff_days
        self.cutoff = now - timedelta(days=cutoff_days)

    def matches(self, record: Mapping[str, Any]) -> bool:
        if record.get("Enabled") is not True:
            return False

        last_logon = to_datetime(record.get("lastLogonTimestamp"))
        if last_logon is None:
            last_logon = to_datetime(record.get("LastLogonDate"))
        if last_logon is None:
            return False

        return last_logon > self.cutoff

    __call__ = matches

    def to_ldap_filter(self) -> str:
        """LDAP rendering of the predicate; LDAP only has >=, so the cutoff moves up one tick."""
        threshold = datetime_to_windows_timestamp(self.cutoff) + 1
        return (
            "(&(objectCategory=person)(objectClass=user)"
            f"(lastLogonTimestamp>={threshold})"
            f"{ENABLED_ACCOUNT_CLAUSE})"
        )

    def __repr__(self) -> str:
        return f"ActivityFilter(cutoff_days={self.cutoff_days}, cutoff='{self.cutoff.isoformat()}')"


def build_activity_filter(
    only_active: bool,
    cutoff_days: int = DEFAULT_CUTOFF_DAYS,
    now: Optional[datetime] = None,
) -> Optional[ActivityFilter]:
    """Activity predicate for an export, or None (match every user) when not restricted."""
    if not only_active:
        return None
    activity_filter = ActivityFilter(cutoff_days=cutoff_days, now=now)
    logger.debug(f"Restricting export to active users: {activity_filter!r}")
    return activity_filter
