class UserExportError(Exception):
    """Base exception for user export errors."""
    pass

class UnknownVerbosityError(UserExportError, ValueError):
    """Raised when a verbosity token is neither a known keyword nor an attribute list."""
    pass

class CanonicalNameError(UserExportError, ValueError):
    """Raised when a canonical name has no containing unit to resolve."""
    pass

class ConfigurationError(UserExportError):
    """Raised when required configuration is missing or invalid."""
    pass
