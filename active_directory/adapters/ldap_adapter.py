import getpass
import logging
from typing import Any, Dict, List, Optional

import keyring
from ldap3 import ALL, BASE, LEVEL, SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPException

from ..records import CONSTRUCTED_USER_ATTRIBUTES, to_directory_record

logger = logging.getLogger(__name__)


class LDAPAdapter:
    """
    LDAP connection adapter for Active Directory user exports.

    This class handles LDAP server connections, authentication, and the
    search operations needed to pull user-account records out of an
    organizational unit. Each search opens a fresh bound connection and
    unbinds it afterwards, so an adapter instance can be handed around as
    the directory session without holding a socket open between calls.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize LDAP adapter with configuration settings.

        Args:
            config: Dictionary containing LDAP connection settings.
                   Required keys:
                   - 'server': LDAP server hostname
                   - 'search_base': Default base DN for searches
                   - 'user': Username for authentication
                   - 'keyring_service': Keyring service name for password

                   Optional keys with defaults:
                   - 'password': Bind password (skips keyring lookup when set)
                   - 'port': LDAP port (default: 636 for SSL, 389 for non-SSL)
                   - 'use_ssl': Enable SSL/TLS (default: True)
                   - 'timeout': Connection timeout in seconds (default: 600)
                   - 'auto_bind': Auto-bind on connection (default: True)
                   - 'get_info': Server info level (default: ALL)
                   - 'default_page_size': Page size for paged searches (default: 1000)

        Raises:
            ValueError: If required configuration keys are missing
            TypeError: If configuration is not a dictionary
        """
        if not isinstance(config, dict):
            raise TypeError("Configuration must be a dictionary")

        required_keys = ["server", "search_base", "user", "keyring_service"]
        missing_keys = [key for key in required_keys if key not in config]
        if missing_keys:
            raise ValueError(f"Missing required configuration keys: {missing_keys}")

        self.server_hostname = config["server"]
        self.search_base = config["search_base"]
        self.user = config["user"]
        self.keyring_service = config["keyring_service"]

        self.use_ssl = config.get("use_ssl", True)
        self.port = config.get("port", 636 if self.use_ssl else 389)
        self.timeout = config.get("timeout", 600)  # AD is very slow, needs long timeout
        self.auto_bind = config.get("auto_bind", True)
        self.get_info = config.get("get_info", ALL)
        self.default_page_size = config.get("default_page_size", 1000)

        self._server = None
        self._password = config.get("password") or None

        logger.debug(f"LDAP adapter initialized for server: {self.server_hostname}")

    def _get_password(self) -> str:
        """
        Retrieve password from configuration, keyring, or prompt user.

        Returns:
            str: The password for LDAP authentication

        Raises:
            KeyboardInterrupt: If user cancels password prompt
        """
        if self._password:
            return self._password

        try:
            password = keyring.get_password(self.keyring_service, self.user)
            if password:
                logger.debug("Using password from keyring")
                self._password = password
                return password
        except Exception as e:
            logger.warning(f"Could not retrieve password from keyring: {e}")

        try:
            password = getpass.getpass(f"Enter LDAP password for {self.user}: ")
            self._password = password

            try:
                save_password = (
                    input("Save password to keyring? (y/n): ").lower().strip()
                )
                if save_password == "y":
                    keyring.set_password(self.keyring_service, self.user, password)
                    logger.info("Password saved to keyring")
            except Exception as e:
                logger.warning(f"Could not save password to keyring: {e}")

            return password

        except KeyboardInterrupt:
            logger.info("Password prompt cancelled by user")
            raise

    def _create_server(self) -> Server:
        """
        Create LDAP server object with current configuration.

        Returns:
            Server: Configured ldap3 Server object

        Raises:
            LDAPException: If server creation fails
        """
        if not self._server:
            try:
                self._server = Server(
                    self.server_hostname,
                    use_ssl=self.use_ssl,
                    port=self.port,
                    get_info=self.get_info,
                    connect_timeout=self.timeout,
                )
                logger.debug(
                    f"LDAP server object created: {self.server_hostname}:{self.port}"
                )
            except Exception as e:
                logger.error(f"Failed to create LDAP server object: {e}")
                raise LDAPException(f"Server creation failed: {e}")

        return self._server

    def _create_connection(self) -> Connection:
        """
        Create and bind LDAP connection.

        Returns:
            Connection: Authenticated ldap3 Connection object

        Raises:
            LDAPException: If connection or authentication fails
        """
        try:
            server = self._create_server()
            password = self._get_password()

            connection = Connection(
                server, user=self.user, password=password, auto_bind=self.auto_bind
            )

            if connection.bound:
                logger.info(f"Successfully connected to {self.server_hostname}")
                return connection
            else:
                raise LDAPException("Failed to bind to LDAP server")

        except Exception as e:
            logger.error(f"LDAP connection failed: {e}")
            raise LDAPException(f"Connection failed: {e}")

    def test_connection(self) -> bool:
        """
        Test LDAP connection by binding and listing a few OUs under the search base.

        Returns:
            bool: True if connection test succeeds, False otherwise
        """
        conn = None
        try:
            conn = self._create_connection()

            success = conn.search(
                search_base=self.search_base,
                search_filter="(objectClass=organizationalUnit)",
                search_scope=LEVEL,
                attributes=["ou"],
                size_limit=10,
            )

            if success:
                logger.info(
                    f"Connection test successful: found {len(conn.entries)} organizational units"
                )
                return True

            logger.warning(f"Search operation failed: {conn.result}")
            return False

        except LDAPException as e:
            logger.error(f"LDAP connection test failed: {e}")
            return False
        finally:
            if conn is not None:
                try:
                    conn.unbind()
                    logger.debug("LDAP connection closed")
                except LDAPException as e:
                    logger.debug(f"Ignoring error while closing connection: {e}")

    def get_connection_info(self) -> Dict[str, Any]:
        """
        Get information about the current LDAP configuration.

        Returns:
            Dict[str, Any]: Configuration information (passwords excluded)
        """
        return {
            "server": self.server_hostname,
            "port": self.port,
            "use_ssl": self.use_ssl,
            "search_base": self.search_base,
            "user": self.user,
            "keyring_service": self.keyring_service,
            "timeout": self.timeout,
            "default_page_size": self.default_page_size,
        }

    def __str__(self) -> str:
        """String representation of the LDAP adapter."""
        ssl_status = "SSL" if self.use_ssl else "non-SSL"
        return f"LDAPAdapter({self.server_hostname}:{self.port}, {ssl_status}, user={self.user})"

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"LDAPAdapter(server='{self.server_hostname}', port={self.port}, "
            f"use_ssl={self.use_ssl}, search_base='{self.search_base}', "
            f"user='{self.user}', keyring_service='{self.keyring_service}')"
        )

    # Core Search Infrastructure

    def search(
        self,
        search_filter: str,
        search_base: Optional[str] = None,
        scope: str = "subtree",
        attributes: Optional[List[str]] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Core search method with paging for complete results.

        Active Directory caps unpaged result sets (usually at 1000 entries),
        so every search goes through ldap3's simple paged results control.

        Args:
            search_filter: LDAP filter string (e.g., '(objectClass=user)')
            search_base: Base DN for search (defaults to adapter's search_base)
            scope: Search scope - 'base', 'level', or 'subtree' (default: 'subtree')
            attributes: List of attributes to retrieve (None for all available)
            page_size: Page size for pagination (defaults to adapter's configured size)

        Returns:
            List[Dict[str, Any]]: One dictionary per entry with 'dn' and the
            formatted attribute values

        Raises:
            LDAPException: If search operation fails
            ValueError: If parameters are invalid
        """
        if not search_filter or not isinstance(search_filter, str):
            raise ValueError("search_filter must be a non-empty string")

        base_dn = search_base if search_base is not None else self.search_base

        scope_mapping = {"base": BASE, "level": LEVEL, "subtree": SUBTREE}
        if scope.lower() not in scope_mapping:
            raise ValueError(f"scope must be one of: {list(scope_mapping.keys())}")
        ldap_scope = scope_mapping[scope.lower()]

        search_attributes = attributes if attributes else ["*"]

        conn = None
        try:
            conn = self._create_connection()

            logger.debug(
                f"Executing search: filter='{search_filter}', base='{base_dn}', scope='{scope}'"
            )

            results = self._execute_paged_search(
                conn,
                page_size or self.default_page_size,
                search_base=base_dn,
                search_filter=search_filter,
                search_scope=ldap_scope,
                attributes=search_attributes,
            )

            logger.info(
                f"Search completed successfully: {len(results)} results returned"
            )
            return results

        except LDAPException as e:
            logger.error(f"LDAP search failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Unexpected error during search: {e}")
            raise LDAPException(f"Search operation failed: {e}")
        finally:
            if conn is not None:
                try:
                    conn.unbind()
                    logger.debug("Search connection closed")
                except LDAPException as e:
                    logger.debug(f"Ignoring error while closing connection: {e}")

    def _execute_paged_search(
        self, conn: Connection, page_size: int, **search_kwargs
    ) -> List[Dict[str, Any]]:
        """
        Execute a paged search and collect every returned entry.

        Uses ldap3's paged_search with generator=False so the search
        completes before the connection is closed. The response list also
        carries referrals and the final done message; only messages of type
        'searchResEntry' are kept.

        Args:
            conn: Active LDAP connection
            page_size: Number of results per page
            **search_kwargs: Search parameters passed to every page request

        Returns:
            List[Dict[str, Any]]: Entry dictionaries with 'dn' plus attributes
        """
        logger.debug(f"Starting paged search with page size: {page_size}")

        response_list = conn.extend.standard.paged_search(
            paged_size=page_size, generator=False, **search_kwargs
        )

        results = []
        for response in response_list:
            if isinstance(response, dict) and response.get("type") == "searchResEntry":
                entry = {"dn": response.get("dn")}
                entry.update(response.get("attributes") or {})
                results.append(entry)

        logger.debug(f"Paged search collected {len(results)} entries")
        return results

    def search_user_records(
        self,
        search_base: str,
        scope: str,
        search_filter: str,
        attributes: Optional[List[str]] = None,
    ) -> List:
        """
        Search for user accounts and return normalised directory records.

        Every record carries the raw LDAP attributes plus the derived
        account properties (Enabled, Created, LastLogonDate, CanonicalName,
        ...) described in active_directory.records.

        Args:
            search_base: Base DN to search under (e.g. 'OU=Managers,DC=corp,DC=local')
            scope: 'level' for direct children only, 'subtree' for all descendants
            search_filter: LDAP filter selecting the user objects
            attributes: Attributes to fetch (None for all attributes plus the
                       constructed ones user exports rely on)

        Returns:
            List: CaseInsensitiveDict records, one per user
        """
        if attributes is None:
            attributes = ["*"] + CONSTRUCTED_USER_ATTRIBUTES

        logger.info(f"Searching user records under {search_base} (scope: {scope})")

        entries = self.search(
            search_filter=search_filter,
            search_base=search_base,
            scope=scope,
            attributes=attributes,
        )
        return [to_directory_record(entry) for entry in entries]
