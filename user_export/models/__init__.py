from .attribute_selection import AttributeSelection, VerbosityLevel
from .export_request import ExportRequest, ExportResult, SearchScope, SearchSpec

__all__ = [
    'AttributeSelection',
    'VerbosityLevel',
    'ExportRequest',
    'ExportResult',
    'SearchScope',
    'SearchSpec',
]
