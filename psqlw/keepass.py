import logging

from psqlw.constants import (
    ERROR_DATABASE_OPEN_FAILED,
    ERROR_ENTRY_NOT_FOUND,
    ERROR_INVALID_PASSWORD_OR_KEYFILE,
)
from psqlw.exceptions import (
    ConfigError,
    KeePassCredentialsError,
    KeePassEntryNotFoundError,
    KeePassError,
)
from pykeepass import PyKeePass
from pykeepass.exceptions import CredentialsError
from typing import Optional

logger = logging.getLogger(__name__)


class KeePassManager:
    """
    Read-only access to the KeePass database holding database passwords.

    Entries are matched to database users either by the entry's username
    field or by a title template such as "postgres/{username}".
    """

    def __init__(
        self, db_path: str, keyfile_path: Optional[str] = None, pykeepass_class=None
    ):
        """
        Initialize KeePassManager with database configuration.

        Args:
            db_path: Path to the KeePass database file
            keyfile_path: Optional path to the keyfile
            pykeepass_class: Optional PyKeePass class for testing (dependency injection)
        """
        self.db_path = db_path
        self.keyfile_path = keyfile_path
        self.kp = None
        self._is_connected = False
        self._pykeepass_class = pykeepass_class or PyKeePass

    def connect(self, password: Optional[str] = None) -> None:
        """
        Establish connection to KeePass database.

        Args:
            password: Master password for the database (optional). If None,
                     attempts to connect with the keyfile alone.

        Raises:
            KeePassCredentialsError: If credentials are invalid
            KeePassError: If database opening fails
        """
        try:
            self.kp = self._pykeepass_class(
                self.db_path, password=password, keyfile=self.keyfile_path
            )
            self._is_connected = True
        except CredentialsError as e:
            raise KeePassCredentialsError(ERROR_INVALID_PASSWORD_OR_KEYFILE, e)
        except Exception as e:
            raise KeePassError(f"{ERROR_DATABASE_OPEN_FAILED}: {e}", e)

    def disconnect(self) -> None:
        """Drop the database handle."""
        self.kp = None
        self._is_connected = False

    def is_connected(self) -> bool:
        """Check if database connection is active."""
        return self._is_connected

    def _require_connection(self):
        if not self._is_connected or self.kp is None:
            raise KeePassError("Database not connected. Call connect() first.")
        return self.kp

    def find_group(self, group_path: Optional[str]):
        """
        Return the group at a '/'-separated path, or the root group.

        Raises:
            KeePassEntryNotFoundError: If a group along the path is missing
        """
        kp = self._require_connection()
        current_group = kp.root_group
        if not group_path:
            return current_group

        group_names = [p for p in group_path.split("/") if p != ""]
        for gname in group_names:
            next_group = kp.find_groups(name=gname, group=current_group, first=True)
            if not next_group:
                raise KeePassEntryNotFoundError(
                    f"Group path '{'/'.join(group_names)}' not found"
                )
            current_group = next_group
        return current_group

    def find_entry(
        self,
        username: str,
        group_path: Optional[str] = None,
        title_template: Optional[str] = None,
    ):
        """
        Find the entry holding the password for a database user.

        Args:
            username: Database username
            group_path: Optional group the search is limited to
            title_template: Optional entry title with a {username} field; when
                given, entries are matched by title instead of username

        Returns:
            The matching entry

        Raises:
            ConfigError: If the title template is malformed
            KeePassEntryNotFoundError: If no entry matches
        """
        kp = self._require_connection()
        group = self.find_group(group_path)

        if title_template:
            try:
                title = title_template.format(username=username)
            except (KeyError, IndexError, ValueError) as e:
                raise ConfigError(f"Invalid title template '{title_template}'", e)
            logger.debug("Looking up KeePass entry titled '%s'", title)
            entry = kp.find_entries(title=title, group=group, first=True)
        else:
            logger.debug("Looking up KeePass entry with username '%s'", username)
            entry = kp.find_entries(username=username, group=group, first=True)

        if entry is None:
            raise KeePassEntryNotFoundError(
                ERROR_ENTRY_NOT_FOUND.format(username=username)
            )
        return entry

    def get_password(
        self,
        username: str,
        group_path: Optional[str] = None,
        title_template: Optional[str] = None,
    ) -> str:
        """Return the password stored for username ('' if the entry has none)."""
        entry = self.find_entry(username, group_path, title_template)
        return entry.password or ""
