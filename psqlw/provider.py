#!/usr/bin/env python3
# provider.py - Print the password of a database user from a KeePass database

import argparse
import getpass
import logging
import os
import sys
from typing import Optional, Sequence

from .config import ProviderConfig
from .constants import CONFIG_FILENAME, ERROR_COULD_NOT_READ_PASSWORD
from .exceptions import KeePassCredentialsError, PsqlwError
from .keepass import KeePassManager
from .validation import UsernameValidator

PROG = "psqlw-keepass"


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    from . import __version__

    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Print the password stored in KeePass for a database user",
        epilog="Example: PGW_PASSWORD_PROVIDER=psqlw-keepass psqlw -U alice mydb",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce logging output (only errors)",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Increase logging verbosity (debug details)",
    )

    parser.add_argument(
        "--config",
        metavar="PATH",
        default=None,
        help=f"Path to configuration file (default: $PGW_KEEPASS_CONFIG or {CONFIG_FILENAME})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show program's version number and exit",
    )
    parser.add_argument(
        "username",
        metavar="USERNAME",
        help="Database user whose password is printed",
    )

    return parser


def _get_master_password(db_path: str) -> str:
    """Prompt for and return the master password."""
    try:
        return getpass.getpass(
            f"Enter master password for {os.path.basename(db_path)}: "
        )
    except EOFError:
        raise KeePassCredentialsError(ERROR_COULD_NOT_READ_PASSWORD)


def _connect(manager: KeePassManager, config: ProviderConfig) -> None:
    """Open the database, prompting for the master password only when it is needed."""
    password = config.get_master_password()
    if password is not None:
        manager.connect(password)
        return

    try:
        manager.connect(password=None)
        return
    except KeePassCredentialsError:
        logging.getLogger(__name__).debug("Database requires a master password")

    manager.connect(_get_master_password(manager.db_path))


def _handle_error(error: PsqlwError) -> None:
    """Log an error as a single line."""
    logging.getLogger(__name__).error("%s", error)
    if error.original_exception:
        logging.getLogger(__name__).debug(
            "  Original error: %s", error.original_exception
        )


def fetch_password(username: str, config: ProviderConfig, pykeepass_class=None) -> str:
    """Look up the password of username in the configured KeePass database."""
    db_path, keyfile_path = config.validate_keepass_config()
    manager = KeePassManager(db_path, keyfile_path, pykeepass_class=pykeepass_class)
    _connect(manager, config)
    try:
        return manager.get_password(
            username,
            group_path=config.get_group(),
            title_template=config.get_title_template(),
        )
    finally:
        manager.disconnect()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the password for USERNAME on stdout; everything else goes to stderr."""
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=f"{PROG}: %(message)s", stream=sys.stderr)

    try:
        username = UsernameValidator.validate_username(args.username)
        password = fetch_password(username, ProviderConfig(args.config))
    except PsqlwError as e:
        _handle_error(e)
        return 1

    print(password)
    return 0


if __name__ == "__main__":
    sys.exit(main())
