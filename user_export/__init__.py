from .config import ExportConfig
from .facade.user_export_facade import UserExportFacade
from .models import AttributeSelection, ExportRequest, ExportResult, SearchScope, VerbosityLevel
from .services import select_attributes

__all__ = [
    'ExportConfig',
    'UserExportFacade',
    'AttributeSelection',
    'ExportRequest',
    'ExportResult',
    'SearchScope',
    'VerbosityLevel',
    'select_attributes',
]
