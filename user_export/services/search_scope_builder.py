import logging
from typing import Optional

from active_directory.records import CONSTRUCTED_USER_ATTRIBUTES

from ..models.export_request import ExportRequest, SearchScope, SearchSpec
from .activity_filter import ALL_USERS_FILTER, ActivityFilter

logger = logging.getLogger(__name__)


def build_search_base(domain: str, organization_unit: str) -> str:
    """
    Build the search base DN for an organizational unit.

    >>> build_search_base("com.org.local", "Managers")
    'OU=Managers,DC=com,DC=org,DC=local'
    """
    components = [f"OU={organization_unit}"]
    if domain:
        components.extend(f"DC={label}" for label in domain.split("."))
    return ",".join(components)


def build_search_scope(include_nested: bool) -> SearchScope:
    return SearchScope.SUBTREE if include_nested else SearchScope.ONE_LEVEL


def build_search_spec(
    request: ExportRequest, activity_filter: Optional[ActivityFilter] = None
) -> SearchSpec:
    """
    Derive where to search and with which filter for an export request.

    Args:
        request: The export request
        activity_filter: Activity predicate, or None to match every user

    Returns:
        SearchSpec: Search base, scope, LDAP filter and attributes for the
        directory query. Every attribute is always fetched; the verbosity
        selection only projects the CSV columns.
    """
    search_base = build_search_base(request.domain, request.organization_unit)
    scope = build_search_scope(request.include_nested)
    search_filter = (
        activity_filter.to_ldap_filter() if activity_filter else ALL_USERS_FILTER
    )

    logger.debug(f"Search spec: base='{search_base}', scope={scope.name}")
    return SearchSpec(
        search_base=search_base,
        scope=scope,
        search_filter=search_filter,
        activity_filter=activity_filter,
        attributes=["*"] + CONSTRUCTED_USER_ATTRIBUTES,
    )
