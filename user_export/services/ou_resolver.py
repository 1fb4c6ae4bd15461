import logging
from typing import Any, Mapping, Optional, Union

from ..exceptions import CanonicalNameError

logger = logging.getLogger(__name__)

# Returned when a canonical name has no path segments at all
NO_PARENT_OU = -1


def resolve_parent_ou(canonical_name: Optional[str]) -> Union[str, int]:
    """
    Return the organizational unit that directly contains an object.

    domain.local/Corp/Sales/jdoe -> Sales

    Args:
        canonical_name: '/'-delimited canonical name of the object

    Returns:
        The segment before the last one, or NO_PARENT_OU for an empty name

    Raises:
        CanonicalNameError: If the name has a single segment and therefore
                            no containing unit
    """
    if not canonical_name:
        return NO_PARENT_OU

    segments = canonical_name.split("/")
    if len(segments) < 2:
        raise CanonicalNameError(
            f"Canonical name '{canonical_name}' has no containing unit"
        )
    return segments[-2]


def is_direct_member(record: Mapping[str, Any], organization_unit: str) -> bool:
    """Whether a record sits directly in organization_unit (exact, case-sensitive)."""
    canonical_name = record.get("CanonicalName")
    try:
        parent = resolve_parent_ou(canonical_name)
    except CanonicalNameError as e:
        logger.warning(f"Skipping record: {e}")
        return False
    return parent == organization_unit
