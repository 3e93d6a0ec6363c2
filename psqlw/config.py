import configparser
import logging
import os
from typing import Mapping, Optional

from psqlw.constants import (
    CONFIG_FILENAME,
    DEFAULT_PASSWORD_PROVIDER,
    ERROR_CONFIG_FILE_NOT_FOUND,
    ERROR_KEY_MISSING,
    ERROR_SECTION_MISSING,
    KEEPASS_CONFIG_VARIABLE,
    KEEPASS_PASSWORD_VARIABLE,
    KEEPASS_SECTION,
    LOG_LEVEL_VARIABLE,
    PROVIDER_VARIABLE,
    USERNAME_VARIABLE,
)
from psqlw.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigKeyMissingError,
    ConfigSectionMissingError,
    ValidationError,
)
from psqlw.validation import PathValidator, SecurityValidator


class PsqlwSettings:
    """
    Settings for one wrapper invocation, read from the environment.

    The wrapper passes every command line argument through to psql, so the
    environment is its only configuration surface.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def default_username(self) -> Optional[str]:
        return self.environ.get(USERNAME_VARIABLE) or None

    def password_provider_override(self) -> Optional[str]:
        return self.environ.get(PROVIDER_VARIABLE) or None

    def default_password_provider(self, invoked_path: str) -> Optional[str]:
        """Return the password_provider beside invoked_path if a file exists there."""
        path = os.path.join(
            os.path.dirname(invoked_path) or ".", DEFAULT_PASSWORD_PROVIDER
        )
        return path if os.path.exists(path) else None

    def log_level(self, default: int = logging.WARNING) -> int:
        """Return the logging level named by PGW_LOG_LEVEL, or default."""
        name = self.environ.get(LOG_LEVEL_VARIABLE, "").strip().upper()
        level = logging.getLevelName(name) if name else default
        return level if isinstance(level, int) else default


class ProviderConfig:
    """Class to manage the KeePass password provider configuration file."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize with configuration file path (falls back to PGW_KEEPASS_CONFIG)."""
        self.environ = os.environ if environ is None else environ
        self.config_path = os.path.expanduser(
            config_path or self.environ.get(KEEPASS_CONFIG_VARIABLE) or CONFIG_FILENAME
        )
        self._config: Optional[configparser.ConfigParser] = None

    def _make_case_preserving_config(self) -> configparser.ConfigParser:
        """
        Create a ConfigParser that preserves case for options.

        Group paths and title templates are matched against KeePass
        verbatim, so their keys and values are not lowercased.
        """

        class _CasePreservingConfig(configparser.ConfigParser):
            def optionxform(self, optionstr: str) -> str:  # type: ignore[override]
                return optionstr

        return _CasePreservingConfig(interpolation=None)

    def validate_config_file(self, config_path: str) -> configparser.ConfigParser:
        """
        Validate and parse configuration file.

        Args:
            config_path: Path to configuration file

        Returns:
            Validated ConfigParser object

        Raises:
            ConfigError: If configuration file is invalid
        """
        try:
            validated_path = PathValidator.validate_file_path(
                config_path, must_exist=True
            )

            config = self._make_case_preserving_config()

            try:
                config.read(validated_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigError(f"Failed to parse config file: {str(e)}", e)

            if KEEPASS_SECTION not in config:
                raise ConfigSectionMissingError(
                    ERROR_SECTION_MISSING.format(
                        section=KEEPASS_SECTION, config_file=config_path
                    )
                )

            if not config[KEEPASS_SECTION].get("database"):
                raise ConfigKeyMissingError(
                    ERROR_KEY_MISSING.format(key="database", section=KEEPASS_SECTION)
                )

            return config

        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {str(e)}", e)

    def load_and_validate_config(self) -> configparser.ConfigParser:
        """Load and validate the configuration file."""
        if not os.path.exists(self.config_path):
            raise ConfigFileNotFoundError(
                ERROR_CONFIG_FILE_NOT_FOUND.format(config_path=self.config_path)
            )
        return self.validate_config_file(self.config_path)

    def get_config(self) -> configparser.ConfigParser:
        """Get the loaded configuration, loading it if necessary."""
        if self._config is None:
            self._config = self.load_and_validate_config()
        return self._config

    def validate_keepass_config(self) -> tuple[str, Optional[str]]:
        """Validate Keepass configuration and return validated paths."""
        keepass_config = self.get_config()[KEEPASS_SECTION]
        db_path = keepass_config["database"]
        keyfile_path: Optional[str] = keepass_config.get("keyfile")

        try:
            validated_db_path = str(
                PathValidator.validate_file_path(os.path.expanduser(db_path))
            )

            validated_keyfile_path = None
            if keyfile_path:
                validated_keyfile_path = str(
                    PathValidator.validate_file_path(os.path.expanduser(keyfile_path))
                )
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {str(e)}", e)

        SecurityValidator.validate_database_security(
            validated_db_path, validated_keyfile_path
        )

        return validated_db_path, validated_keyfile_path

    def get_group(self) -> Optional[str]:
        """Group path entries are searched in, if configured."""
        return self.get_config()[KEEPASS_SECTION].get("group") or None

    def get_title_template(self) -> Optional[str]:
        """Entry title template containing {username}, if configured."""
        return self.get_config()[KEEPASS_SECTION].get("title") or None

    def get_master_password(self) -> Optional[str]:
        return self.environ.get(KEEPASS_PASSWORD_VARIABLE)
