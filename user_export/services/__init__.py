from .activity_filter import ActivityFilter, build_activity_filter
from .attribute_selector import select_attributes
from .ou_resolver import NO_PARENT_OU, is_direct_member, resolve_parent_ou
from .search_scope_builder import build_search_base, build_search_scope, build_search_spec

__all__ = [
    'ActivityFilter',
    'build_activity_filter',
    'select_attributes',
    'NO_PARENT_OU',
    'is_direct_member',
    'resolve_parent_ou',
    'build_search_base',
    'build_search_scope',
    'build_search_spec',
]
