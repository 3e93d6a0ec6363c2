#!/usr/bin/env python3
"""
Main entry point for psqlw - Run psql with a password fetched for the user
"""

# Logging is configured inside core.main from PGW_LOG_LEVEL.
# This CLI wrapper is responsible for exit codes.
import sys
from .core import main as psqlw_main
from .exceptions import PsqlwError


def main() -> None:
    """Main entry point for psqlw."""
    try:
        exit_code = psqlw_main()
    except PsqlwError:
        # Known failure modes are logged where they happen
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
