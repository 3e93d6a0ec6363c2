"""
Custom exceptions for psqlw - Run psql with a password fetched for the user
"""

from typing import Optional


class PsqlwError(Exception):
    """Base exception for psqlw errors."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize psqlw error.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        self.message = message
        self.original_exception = original_exception
        super().__init__(self.message)


class ConfigError(PsqlwError):
    """Configuration-related errors."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message, original_exception)


class ProviderNotConfiguredError(ConfigError):
    """Raised when a username was found but no password provider is set up."""
    pass


class ConfigFileNotFoundError(ConfigError):
    """Raised when configuration file is not found."""
    pass


class ConfigSectionMissingError(ConfigError):
    """Raised when required configuration section is missing."""
    pass


class ConfigKeyMissingError(ConfigError):
    """Raised when required configuration key is missing."""
    pass


class ProviderError(PsqlwError):
    """Password provider errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        original_exception: Optional[Exception] = None,
    ):
        """
        Initialize password provider error.

        Args:
            message: Error message
            provider: Path or command name of the password provider
            original_exception: Original exception that caused this error
        """
        self.provider = provider
        super().__init__(message, original_exception)


class ProviderInvocationError(ProviderError):
    """Raised when the password provider cannot be started."""
    pass


class ProviderExitError(ProviderError):
    """Raised when the password provider exits with a non-zero status."""
    pass


class LaunchError(PsqlwError):
    """Raised when the target command cannot be started."""
    pass


class ConnectionURIError(PsqlwError):
    """Raised when a connection URI cannot be parsed."""
    pass


class ValidationError(PsqlwError):
    """Input validation errors."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message, original_exception)


class PathValidationError(ValidationError):
    """Raised when path validation fails."""
    pass


class SecurityError(PsqlwError):
    """Security-related errors."""
    pass


class DatabaseSecurityError(SecurityError):
    """Raised when database security validation fails."""
    pass


class KeyfileSecurityError(SecurityError):
    """Raised when keyfile security validation fails."""
    pass


class KeePassError(PsqlwError):
    """KeePass-related errors."""
    pass


class KeePassCredentialsError(KeePassError):
    """Raised when KeePass credentials are invalid."""
    pass


class KeePassEntryNotFoundError(KeePassError):
    """Raised when no KeePass entry matches the requested user."""
    pass
