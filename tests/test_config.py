"""
Tests for configuration handling
"""

import configparser
import logging
from pathlib import Path

import pytest

from psqlw.config import ProviderConfig, PsqlwSettings
from psqlw.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigKeyMissingError,
    ConfigSectionMissingError,
)


def write_config(tmp_path: Path, content: str, name: str = "psqlw.ini") -> Path:
    cfg = tmp_path / name
    cfg.write_text(content, encoding="utf-8")
    return cfg


class TestPsqlwSettings:
    """Test environment-based wrapper settings"""

    def test_default_username(self):
        """Test PGUSER lookup"""
        assert PsqlwSettings({"PGUSER": "alice"}).default_username() == "alice"
        assert PsqlwSettings({"PGUSER": ""}).default_username() is None
        assert PsqlwSettings({}).default_username() is None

    def test_password_provider_override(self):
        """Test PGW_PASSWORD_PROVIDER lookup"""
        settings = PsqlwSettings({"PGW_PASSWORD_PROVIDER": "/opt/provider"})
        assert settings.password_provider_override() == "/opt/provider"
        assert PsqlwSettings({}).password_provider_override() is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("DEBUG", logging.DEBUG),
            ("debug", logging.DEBUG),
            (" error ", logging.ERROR),
            ("", logging.WARNING),
            ("bogus", logging.WARNING),
        ],
    )
    def test_log_level(self, value, expected):
        """Test PGW_LOG_LEVEL parsing"""
        assert PsqlwSettings({"PGW_LOG_LEVEL": value}).log_level() == expected

    def test_log_level_unset(self):
        """Test the default level"""
        assert PsqlwSettings({}).log_level() == logging.WARNING


class TestProviderConfig:
    """Test the KeePass provider configuration file"""

    def test_valid_config(self, tmp_path):
        """Test a complete config file"""
        db = tmp_path / "secrets.kdbx"
        db.write_text("dummy")
        db.chmod(0o600)
        cfg = write_config(
            tmp_path,
            f"[keepass]\ndatabase = {db}\ngroup = Databases/Postgres\n"
            "title = PG {username}\n",
        )

        config = ProviderConfig(str(cfg), environ={})
        assert isinstance(config.get_config(), configparser.ConfigParser)
        assert config.validate_keepass_config() == (str(db.resolve()), None)
        assert config.get_group() == "Databases/Postgres"
        assert config.get_title_template() == "PG {username}"

    def test_optional_settings_absent(self, tmp_path):
        """Test group and title default to None"""
        cfg = write_config(tmp_path, "[keepass]\ndatabase = x.kdbx\n")
        config = ProviderConfig(str(cfg), environ={})
        assert config.get_group() is None
        assert config.get_title_template() is None

    def test_path_from_environment(self, tmp_path):
        """Test PGW_KEEPASS_CONFIG is used when no path is given"""
        cfg = write_config(tmp_path, "[keepass]\ndatabase = x.kdbx\n")
        config = ProviderConfig(environ={"PGW_KEEPASS_CONFIG": str(cfg)})
        assert config.config_path == str(cfg)

    def test_default_path(self):
        """Test ~/.psqlw is the default"""
        config = ProviderConfig(environ={})
        assert config.config_path == str(Path("~/.psqlw").expanduser())

    def test_config_not_found(self, tmp_path):
        """Test a missing file"""
        config = ProviderConfig(str(tmp_path / "missing.ini"), environ={})
        with pytest.raises(ConfigFileNotFoundError):
            config.get_config()

    def test_missing_section(self, tmp_path):
        """Test a file without [keepass]"""
        cfg = write_config(tmp_path, "[other]\nvalue = test\n")
        with pytest.raises(ConfigSectionMissingError, match="keepass"):
            ProviderConfig(str(cfg), environ={}).get_config()

    def test_missing_database(self, tmp_path):
        """Test [keepass] without database"""
        cfg = write_config(tmp_path, "[keepass]\nkeyfile = key.key\n")
        with pytest.raises(ConfigKeyMissingError, match="'database' key missing"):
            ProviderConfig(str(cfg), environ={}).get_config()

    def test_parse_error(self, tmp_path):
        """Test a malformed file"""
        cfg = write_config(tmp_path, "[keepass\ndatabase = x.kdbx\n")
        with pytest.raises(ConfigError, match="Failed to parse config file"):
            ProviderConfig(str(cfg), environ={}).get_config()

    def test_database_not_found(self, tmp_path):
        """Test a database path that does not exist"""
        cfg = write_config(tmp_path, f"[keepass]\ndatabase = {tmp_path / 'no.kdbx'}\n")
        with pytest.raises(ConfigError, match="File not found"):
            ProviderConfig(str(cfg), environ={}).validate_keepass_config()

    def test_keyfile_validated(self, tmp_path):
        """Test a configured keyfile must exist"""
        db = tmp_path / "secrets.kdbx"
        db.write_text("dummy")
        cfg = write_config(
            tmp_path,
            f"[keepass]\ndatabase = {db}\nkeyfile = {tmp_path / 'missing.key'}\n",
        )
        with pytest.raises(ConfigError, match="File not found"):
            ProviderConfig(str(cfg), environ={}).validate_keepass_config()

    def test_master_password(self):
        """Test PGW_KEEPASS_PASSWORD lookup"""
        config = ProviderConfig("x", environ={"PGW_KEEPASS_PASSWORD": "pw"})
        assert config.get_master_password() == "pw"
        assert ProviderConfig("x", environ={}).get_master_password() is None
