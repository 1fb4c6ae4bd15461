from .adapters.ldap_adapter import LDAPAdapter
from .records import to_directory_record

__all__ = ['LDAPAdapter', 'to_directory_record']
