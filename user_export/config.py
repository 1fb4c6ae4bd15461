import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()

DEFAULT_KEYRING_SERVICE = 'ldap_ad_export'
DEFAULT_CUTOFF_DAYS = 180


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class ExportConfig:
    """Centralized export configuration management."""

    @staticmethod
    def get_ldap_config(domain: str, search_base: Optional[str] = None) -> Dict[str, Any]:
        """
        Get LDAP adapter configuration from environment variables.

        Args:
            domain: DNS domain being exported; used as the server when
                    AD_SERVER is not set
            search_base: Default search base for the adapter

        Raises:
            ConfigurationError: If AD_USER is not set or a number is malformed
        """
        user = os.getenv('AD_USER')
        if not user:
            raise ConfigurationError('Missing required environment variable: AD_USER')

        use_ssl = _env_flag('AD_USE_SSL', True)
        try:
            port = int(os.getenv('AD_PORT', '636' if use_ssl else '389'))
            page_size = int(os.getenv('AD_PAGE_SIZE', '1000'))
        except ValueError as e:
            raise ConfigurationError(f'Invalid numeric LDAP setting: {e}')

        if search_base is None:
            search_base = ','.join(f'DC={label}' for label in domain.split('.') if label)

        return {
            'server': os.getenv('AD_SERVER', domain),
            'search_base': search_base,
            'user': user,
            'password': os.getenv('AD_PASSWORD'),
            'keyring_service': os.getenv('AD_KEYRING_SERVICE', DEFAULT_KEYRING_SERVICE),
            'port': port,
            'use_ssl': use_ssl,
            'default_page_size': page_size,
        }

    @staticmethod
    def get_export_root() -> str:
        """Installation root under which the Exports/ tree is written."""
        return os.getenv('EXPORT_ROOT', os.getcwd())

    @staticmethod
    def get_cutoff_days() -> int:
        """Activity window in days for active-only exports."""
        value = os.getenv('EXPORT_CUTOFF_DAYS', str(DEFAULT_CUTOFF_DAYS))
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f'EXPORT_CUTOFF_DAYS must be an integer, got {value!r}')
