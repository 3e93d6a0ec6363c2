#!/usr/bin/env python3
# core.py - Run psql with PGPASSWORD fetched from a password provider

import logging
import os
import sys
from typing import Optional, Sequence

from .config import PsqlwSettings
from .constants import TARGET_COMMAND
from .launcher import launch

PROG = "psqlw"


def program_name(invoked_path: str) -> str:
    """Name prefixed to diagnostics: the basename the wrapper was invoked as."""
    name = os.path.basename(invoked_path)
    if not name or name.startswith("__main__"):
        # python -m psqlw
        return PROG
    return name


def configure_logging(prog: str, level: int = logging.WARNING) -> None:
    """Send diagnostics to stderr as '<prog>: <message>' lines."""
    logging.basicConfig(
        level=level,
        format=prog.replace("%", "%%") + ": %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run psql with the arguments this process was given.

    psqlw has no options of its own; everything after the program name is
    handed to psql unchanged. Verbosity is set through PGW_LOG_LEVEL.
    """
    argv = sys.argv if argv is None else argv
    invoked_path = argv[0] if argv else PROG

    settings = PsqlwSettings()
    configure_logging(program_name(invoked_path), settings.log_level())

    return launch(invoked_path, TARGET_COMMAND, list(argv[1:]))


if __name__ == "__main__":
    sys.exit(main())
