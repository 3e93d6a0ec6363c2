#!/usr/bin/env python3
"""
Shared constants used across psqlw modules.

This module contains the psql option grammar, environment variable names
and error messages to avoid circular imports between modules.
"""

from types import MappingProxyType

TARGET_COMMAND = "psql"

# Environment variables
PASSWORD_VARIABLE = "PGPASSWORD"
USERNAME_VARIABLE = "PGUSER"
PROVIDER_VARIABLE = "PGW_PASSWORD_PROVIDER"
LOG_LEVEL_VARIABLE = "PGW_LOG_LEVEL"
KEEPASS_CONFIG_VARIABLE = "PGW_KEEPASS_CONFIG"
KEEPASS_PASSWORD_VARIABLE = "PGW_KEEPASS_PASSWORD"

# Executable looked up next to the wrapper when no provider is configured
DEFAULT_PASSWORD_PROVIDER = "password_provider"

USERNAME_SHORT_OPTION = "U"
USERNAME_LONG_OPTION = "username"

URI_PREFIXES = ("postgresql:", "postgres:")
CONNINFO_USER_KEY = "user"

# psql's option grammar: option -> takes a value.
# Options with an optional argument (-?, --help) never consume the next token.
SHORT_OPTIONS = MappingProxyType(
    {
        "a": False,
        "A": False,
        "b": False,
        "c": True,
        "d": True,
        "e": False,
        "E": False,
        "f": True,
        "F": True,
        "h": True,
        "H": False,
        "l": False,
        "L": True,
        "n": False,
        "o": True,
        "p": True,
        "P": True,
        "q": False,
        "R": True,
        "s": False,
        "S": False,
        "t": False,
        "T": True,
        "U": True,
        "v": True,
        # -V prints the version and exits; it takes no value
        "V": False,
        "w": False,
        "W": False,
        "x": False,
        "X": False,
        "z": False,
        "0": False,
        "1": False,
        "?": False,
    }
)

LONG_OPTIONS = MappingProxyType(
    {
        "echo-all": False,
        "no-align": False,
        "command": True,
        "dbname": True,
        "echo-queries": False,
        "echo-errors": False,
        "echo-hidden": False,
        "file": True,
        "field-separator": True,
        "host": True,
        "html": False,
        "list": False,
        "log-file": True,
        "no-readline": False,
        "single-transaction": False,
        "output": True,
        "port": True,
        "pset": True,
        "quiet": False,
        "record-separator": True,
        "single-step": False,
        "single-line": False,
        "tuples-only": False,
        "table-attr": True,
        "username": True,
        "set": True,
        "variable": True,
        "version": False,
        "no-password": False,
        "password": False,
        "expanded": False,
        "no-psqlrc": False,
        "field-separator-zero": False,
        "record-separator-zero": False,
        "csv": False,
        "help": False,
    }
)

# Constants for error messages
ERROR_NO_USERNAME = "Cannot detect username to login"
ERROR_TOO_MANY_POSITIONAL = "Too many positional arguments: %d"
ERROR_PROVIDER_UNDEFINED = f"environment variable {PROVIDER_VARIABLE} is undefined"
ERROR_PROVIDER_EXITED = 'password provider "{provider}" exited with an error: {error}'
ERROR_PROVIDER_INVOKE_FAILED = (
    'failed to invoke the password provider "{provider}": {error}'
)
ERROR_COMMAND_START_FAILED = "failed to run {command}: {error}"
ERROR_COMMAND_SIGNALED = "{command} terminated by signal {signal}"

# KeePass provider configuration
CONFIG_FILENAME = "~/.psqlw"
KEEPASS_SECTION = "keepass"
ERROR_CONFIG_FILE_NOT_FOUND = "Configuration file '{config_path}' not found."
ERROR_SECTION_MISSING = "Section '[{section}]' missing in '{config_file}'"
ERROR_KEY_MISSING = "'{key}' key missing in '[{section}]' section"
ERROR_DATABASE_OPEN_FAILED = "Failed to open KeePass database"
ERROR_INVALID_PASSWORD_OR_KEYFILE = "Invalid master password or key file"
ERROR_COULD_NOT_READ_PASSWORD = "Could not read password"
ERROR_ENTRY_NOT_FOUND = "No KeePass entry found for user '{username}'"
