"""
psqlw - Run psql with a password fetched for the user logging in

A transparent wrapper around the psql command line client. It works out
which user psql is going to log in as, asks an external password provider
for that user's password, and runs psql with PGPASSWORD set in the child
environment only.
"""

__version__ = "0.1.0"
__author__ = "Stephen Cross"
__email__ = "stephen@example.com"

from .launcher import launch

__all__ = ["launch"]
