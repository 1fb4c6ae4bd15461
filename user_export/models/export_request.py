from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .attribute_selection import AttributeSelection


class SearchScope(Enum):
    """Search depth below the search base, valued as the LDAP adapter scope names."""
    ONE_LEVEL = "level"
    SUBTREE = "subtree"


@dataclass(frozen=True)
class ExportRequest:
    """Parameters of a single user export run."""
    domain: str
    organization_unit: str
    verbosity: AttributeSelection
    include_nested: bool = False
    only_active: bool = False

    @classmethod
    def from_arguments(
        cls,
        domain: str,
        organization_unit: str,
        only_active: bool,
        include_nested: bool,
        verbosity: str,
    ) -> "ExportRequest":
        """
        Build a request from raw invocation arguments.

        Args:
            domain: Dotted DNS domain (e.g. 'com.org.local')
            organization_unit: Name of the organizational unit to export
            only_active: Restrict to enabled accounts with a recent logon
            include_nested: Also export users of nested organizational units
            verbosity: Verbosity keyword or comma-separated attribute list

        Raises:
            UnknownVerbosityError: If verbosity is neither a keyword nor a list
        """
        from ..services.attribute_selector import select_attributes

        return cls(
            domain=domain,
            organization_unit=organization_unit,
            verbosity=select_attributes(verbosity),
            include_nested=include_nested,
            only_active=only_active,
        )

    @property
    def activity_tag(self) -> str:
        return "Active" if self.only_active else "All"

    @property
    def organization_unit_folder(self) -> str:
        """Organization unit name with all whitespace removed."""
        return "".join(self.organization_unit.split())


@dataclass(frozen=True)
class SearchSpec:
    """Where and how to search for the users of an export."""
    search_base: str
    scope: SearchScope
    search_filter: str
    activity_filter: Optional[Any] = None
    attributes: Optional[List[str]] = None


@dataclass
class ExportResult:
    """Outcome of an export run."""
    path: str
    columns: List[str] = field(default_factory=list)
    row_count: int = 0
    fetched_count: int = 0
