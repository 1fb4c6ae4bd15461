from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping


class VerbosityLevel(Enum):
    """How much of each user record ends up in the export."""
    ALL = "All"
    VERBOSE = "Verbose"
    NORMAL = "Normal"
    MINIMAL = "Minimal"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class AttributeSelection:
    """Resolved verbosity: the level plus the ordered column names it selects."""
    level: VerbosityLevel
    attributes: List[str] = field(default_factory=list)

    @property
    def is_wildcard(self) -> bool:
        return self.level is VerbosityLevel.ALL

    @property
    def tag(self) -> str:
        """Verbosity tag used in export file names."""
        return self.level.value

    def columns_for(self, records: Iterable[Mapping[str, Any]]) -> List[str]:
        """
        Column names for a set of records.

        Explicit selections are returned as-is. The wildcard expands to every
        attribute present on any record, in first-seen order.
        """
        if not self.is_wildcard:
            return list(self.attributes)

        columns = []
        seen = set()
        for record in records:
            for key in record.keys():
                if key.lower() not in seen:
                    seen.add(key.lower())
                    columns.append(key)
        return columns
