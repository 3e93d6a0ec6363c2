"""
Username resolution for psqlw.

Works out the user psql will log in as by following psql's own rules:
options are scanned left to right, trailing positional arguments override
them, and PGUSER is consulted last.
"""

import logging
import re
from typing import List, Mapping, Optional, Sequence
from urllib.parse import unquote, urlsplit

from .constants import (
    CONNINFO_USER_KEY,
    ERROR_TOO_MANY_POSITIONAL,
    LONG_OPTIONS,
    SHORT_OPTIONS,
    URI_PREFIXES,
    USERNAME_LONG_OPTION,
    USERNAME_SHORT_OPTION,
)
from .config import PsqlwSettings
from .exceptions import ConnectionURIError

# A '%' not followed by two hex digits
INVALID_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def is_long_option(arg: str) -> bool:
    return arg.startswith("--")


def is_short_option(arg: str) -> bool:
    return arg.startswith("-")


class UsernameResolver:
    """
    Resolve the login username from a psql argument vector.

    Args:
        environ: Environment used for the PGUSER fallback (default: os.environ)
        logger: Logger receiving warnings and parse errors
        short_options: Mapping of short option letter -> takes a value
        long_options: Mapping of long option name -> takes a value
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
        short_options: Mapping[str, bool] = SHORT_OPTIONS,
        long_options: Mapping[str, bool] = LONG_OPTIONS,
    ):
        self.settings = PsqlwSettings(environ)
        self.logger = logger or logging.getLogger(__name__)
        self.short_options = short_options
        self.long_options = long_options

    def resolve(self, args: Sequence[str]) -> Optional[str]:
        """Return the username psql would use, or None if there is none."""
        username = self.search_args(args)
        if not username:
            username = self.settings.default_username()
        return username or None

    def search_args(self, args: Sequence[str]) -> Optional[str]:
        """
        Scan options and positional arguments for a username.

        Value-taking options consume the following token even when they have
        nothing to do with the username, so that their values are never
        mistaken for positional arguments.
        """
        username: Optional[str] = None
        positional: List[str] = []

        i = 0
        while i < len(args):
            arg = args[i]
            i += 1

            if is_long_option(arg):
                if len(arg) <= 2:
                    continue

                name, sep, value = arg[2:].partition("=")
                if not sep:
                    value = ""
                    if self.long_options.get(name, False) and i < len(args):
                        value = args[i]
                        i += 1

                if name == USERNAME_LONG_OPTION:
                    username = value

            elif is_short_option(arg):
                if len(arg) <= 1:
                    continue

                letter = arg[1]
                if len(arg) > 2:
                    value = arg[2:]
                else:
                    value = ""
                    if self.short_options.get(letter, False) and i < len(args):
                        value = args[i]
                        i += 1

                if letter == USERNAME_SHORT_OPTION:
                    username = value

            else:
                positional.append(arg)

        found = self.search_positional_args(positional)
        if found:
            username = found

        return username

    def search_positional_args(self, args: Sequence[str]) -> Optional[str]:
        """Handle `psql [DBNAME [USERNAME]]` and the single connection string form."""
        count = len(args)
        if count == 0:
            return None
        if count == 1:
            return self.search_connection_arg(args[0])
        if count == 2:
            return args[1]
        self.logger.warning(ERROR_TOO_MANY_POSITIONAL, count)
        return None

    def search_connection_arg(self, arg: str) -> Optional[str]:
        if arg.startswith(URI_PREFIXES):
            try:
                return self.search_connection_uri(arg)
            except ConnectionURIError as e:
                self.logger.error("%s", e)
                return None
        return self.search_connection_string(arg)

    @staticmethod
    def search_connection_uri(uri: str) -> Optional[str]:
        """
        Extract the user name from a postgresql:// URI.

        Raises:
            ConnectionURIError: If the URI is malformed
        """
        try:
            parts = urlsplit(uri)
            username = parts.username
        except ValueError as e:
            raise ConnectionURIError(f"parse {uri!r}: {e}", e)

        if not username:
            return None
        if INVALID_ESCAPE_RE.search(username):
            raise ConnectionURIError(f"parse {uri!r}: invalid URL escape in user info")
        return unquote(username) or None

    @staticmethod
    def search_connection_string(conninfo: str) -> Optional[str]:
        """Return the value of the first `user=` parameter of a keyword/value string."""
        for param in conninfo.split():
            key, sep, value = param.partition("=")
            if sep and key == CONNINFO_USER_KEY:
                return value.strip() or None
        return None
