from .user_export_facade import UserExportFacade

__all__ = ['UserExportFacade']
