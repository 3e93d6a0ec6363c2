"""
Input validation for the psqlw KeePass password provider
"""

import os
import logging
from pathlib import Path
from typing import Optional
from .exceptions import (
    ValidationError,
    PathValidationError,
    DatabaseSecurityError,
    KeyfileSecurityError,
)

logger = logging.getLogger(__name__)

# Constants for validation limits
MAX_USERNAME_LENGTH = 255
MIN_PRINTABLE_VALUE = 32

# Constants for error messages
ERROR_PATH_INVALID_FORMAT = "Invalid path format"
ERROR_KEYFILE_WORLD_READABLE = (
    "Keyfile is world-readable. Please restrict permissions to owner only."
)
ERROR_DATABASE_WORLD_READABLE = (
    "Database file is world-readable. Please restrict permissions to owner only."
)
ERROR_FILE_NOT_FOUND = "File not found: {path}"
ERROR_PATH_NOT_FILE = "Path is not a file: {path}"
ERROR_INVALID_PATH = "Invalid path: {error}"
ERROR_CANNOT_ACCESS_DB = "Cannot access database file: {error}"
ERROR_CANNOT_ACCESS_KEYFILE = "Cannot access keyfile: {error}"


class BaseValidator:
    """Base class for validators with common validation logic."""

    @staticmethod
    def validate_non_empty_string(value: Optional[str], field_name: str) -> str:
        """Validate that a value is a non-empty string."""
        if not value or not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a non-empty string")
        return value

    @staticmethod
    def validate_string_length(value: str, max_length: int, field_name: str) -> str:
        """Validate that a string does not exceed maximum length."""
        if len(value) > max_length:
            raise ValidationError(
                f"{field_name} too long (max {max_length} characters)"
            )
        return value

    @staticmethod
    def validate_no_control_chars(value: str, field_name: str) -> str:
        """Validate that a string contains no control characters."""
        if any(ord(char) < MIN_PRINTABLE_VALUE or ord(char) == 127 for char in value):
            raise ValidationError(f"{field_name} contains invalid characters")
        return value


class PathValidator(BaseValidator):
    """Validates file paths."""

    @staticmethod
    def validate_file_path(path: Optional[str], must_exist: bool = True) -> Path:
        """
        Validate file path.

        Args:
            path: File path to validate
            must_exist: Whether the file must exist

        Returns:
            Validated Path object

        Raises:
            PathValidationError: If path is invalid or file doesn't exist when required
        """
        validated_path = BaseValidator.validate_non_empty_string(path, "Path")

        # Prevent directory traversal
        if ".." in Path(validated_path).parts:
            raise PathValidationError(ERROR_PATH_INVALID_FORMAT)

        try:
            expanded_path = Path(validated_path).expanduser().resolve()
        except (OSError, RuntimeError) as e:
            raise PathValidationError(ERROR_INVALID_PATH.format(error=e))

        if must_exist and not expanded_path.exists():
            raise PathValidationError(ERROR_FILE_NOT_FOUND.format(path=expanded_path))

        if must_exist and not expanded_path.is_file():
            raise PathValidationError(ERROR_PATH_NOT_FILE.format(path=expanded_path))

        return expanded_path


class UsernameValidator(BaseValidator):
    """Validates usernames handed to the password provider."""

    @staticmethod
    def validate_username(username: Optional[str]) -> str:
        """
        Validate a database username.

        Raises:
            ValidationError: If the username is empty, too long or has control characters
        """
        validated = BaseValidator.validate_non_empty_string(username, "Username")
        validated = BaseValidator.validate_string_length(
            validated, MAX_USERNAME_LENGTH, "Username"
        )
        return BaseValidator.validate_no_control_chars(validated, "Username")


class SecurityValidator:
    """Validates security aspects of KeePass files."""

    @staticmethod
    def validate_database_security(
        db_path: str, keyfile_path: Optional[str] = None
    ) -> None:
        """
        Validate file permissions and security.

        Args:
            db_path: Path to KeePass database
            keyfile_path: Optional path to keyfile

        Raises:
            DatabaseSecurityError: If the database cannot be accessed
            KeyfileSecurityError: If the keyfile cannot be accessed
        """
        try:
            db_stat = os.stat(db_path)
        except OSError as e:
            raise DatabaseSecurityError(ERROR_CANNOT_ACCESS_DB.format(error=e), e)

        key_stat = None
        if keyfile_path:
            try:
                key_stat = os.stat(keyfile_path)
            except OSError as e:
                raise KeyfileSecurityError(
                    ERROR_CANNOT_ACCESS_KEYFILE.format(error=e), e
                )

        # Mode bits are only meaningful on POSIX systems
        if os.name != "posix":
            return

        if db_stat.st_mode & 0o044:
            logger.warning("%s %s", ERROR_DATABASE_WORLD_READABLE, db_path)

        if key_stat is not None and key_stat.st_mode & 0o044:
            logger.warning("%s %s", ERROR_KEYFILE_WORLD_READABLE, keyfile_path)
