"""
Unit tests for directory record normalisation.
"""

from datetime import datetime, timezone

from active_directory.records import (
    datetime_to_windows_timestamp,
    dn_to_canonical_name,
    parse_uac,
    to_datetime,
    to_directory_record,
    windows_timestamp_to_datetime,
)

UNIX_EPOCH_FILETIME = 116444736000000000


class TestTimestamps:
    """Tests for AD timestamp conversion."""

    def test_filetime_to_datetime(self):
        assert windows_timestamp_to_datetime(UNIX_EPOCH_FILETIME) == datetime(
            1970, 1, 1, tzinfo=timezone.utc
        )

    def test_filetime_never(self):
        assert windows_timestamp_to_datetime(0) is None
        assert windows_timestamp_to_datetime(9223372036854775807) is None

    def test_datetime_to_filetime(self):
        assert datetime_to_windows_timestamp(datetime(1970, 1, 1, tzinfo=timezone.utc)) == UNIX_EPOCH_FILETIME
        # naive datetimes are UTC
        assert datetime_to_windows_timestamp(datetime(1970, 1, 1)) == UNIX_EPOCH_FILETIME

    def test_to_datetime_shapes(self):
        expected = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)
        assert to_datetime(expected) == expected
        assert to_datetime(datetime(2024, 1, 31, 12, 0)) == expected
        assert to_datetime("20240131120000.0Z") == expected
        assert to_datetime([expected]) == expected
        assert to_datetime(str(UNIX_EPOCH_FILETIME)) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_to_datetime_never_and_garbage(self):
        assert to_datetime(None) is None
        assert to_datetime([]) is None
        assert to_datetime(datetime(1601, 1, 1, tzinfo=timezone.utc)) is None
        assert to_datetime("not a date") is None

    def test_to_datetime_max_is_never(self):
        # ldap3 formats a never-set FILETIME as datetime.max
        assert to_datetime(datetime.max) is None
        assert to_datetime([datetime.max]) is None


class TestAccountControl:
    """Tests for userAccountControl decoding."""

    def test_normal_account(self):
        flags = parse_uac(512)
        assert flags["Enabled"] is True
        assert flags["LockedOut"] is False
        assert flags["PasswordNeverExpires"] is False

    def test_disabled_account_with_flags(self):
        flags = parse_uac(512 | 0x2 | 0x10000 | 0x20 | 0x40)
        assert flags["Enabled"] is False
        assert flags["PasswordNeverExpires"] is True
        assert flags["PasswordNotRequired"] is True
        assert flags["CannotChangePassword"] is True

    def test_computed_flags(self):
        flags = parse_uac(512, computed=0x10 | 0x800000)
        assert flags["LockedOut"] is True
        assert flags["PasswordExpired"] is True

    def test_missing_uac(self):
        assert parse_uac(None) == {}


class TestDirectoryRecord:
    """Tests for building directory records from LDAP entries."""

    def test_canonical_name_from_dn(self):
        dn = "CN=Jane Doe,OU=Sales,OU=Corp,DC=corp,DC=local"
        assert dn_to_canonical_name(dn) == "corp.local/Corp/Sales/Jane Doe"
        assert dn_to_canonical_name("") == ""

    def test_record_is_case_insensitive_and_derived(self):
        record = to_directory_record({
            "dn": "CN=jdoe,OU=Managers,DC=corp,DC=local",
            "sAMAccountName": "jdoe",
            "name": "John Doe",
            "middleName": "Q",
            "userAccountControl": 514,
            "whenCreated": datetime(2021, 3, 4, tzinfo=timezone.utc),
            "lastLogonTimestamp": UNIX_EPOCH_FILETIME,
            "canonicalName": ["corp.local/Managers/John Doe"],
        })

        assert record["SAMAccountName"] == "jdoe"
        assert record["samaccountname"] == "jdoe"
        assert record["Name"] == "John Doe"
        assert record["OtherName"] == "Q"
        assert record["Enabled"] is False
        assert record["Created"] == datetime(2021, 3, 4, tzinfo=timezone.utc)
        assert record["LastLogonDate"] == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert record["CanonicalName"] == "corp.local/Managers/John Doe"
        assert record["DistinguishedName"] == "CN=jdoe,OU=Managers,DC=corp,DC=local"
        assert record.get("HomeDrive") is None

    def test_name_falls_back_to_cn(self):
        record = to_directory_record({"dn": "CN=svc,DC=corp,DC=local", "cn": "svc"})
        assert record["Name"] == "svc"
        assert record["CanonicalName"] == "corp.local/svc"
        assert "Enabled" not in record

    def test_never_logged_on_has_no_last_logon_date(self):
        record = to_directory_record({
            "dn": "CN=new,OU=Managers,DC=corp,DC=local",
            "userAccountControl": 512,
            "lastLogonTimestamp": datetime.max,
        })
        assert record["LastLogonDate"] is None
        assert record["Enabled"] is True
