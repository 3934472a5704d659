"""
passwdsync Syncer Base Class

Abstract base class for all syncer backends.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from passwdsync.models import Group, User


class Syncer(ABC):
    """
    Abstract base class for syncers.

    A syncer applies one change at a time to the local account database.
    Lookups return None for entities that do not exist. Mutations raise a
    PasswdSyncError subclass on failure and, once started, run to the end
    even if the calling task is cancelled.
    """

    @abstractmethod
    async def lookup_user(self, name: str) -> Optional[User]:
        """Return the local user ``name``, or None if it does not exist."""
        pass

    @abstractmethod
    async def lookup_group(self, name: str) -> Optional[Group]:
        """Return the local group ``name``, or None if it does not exist."""
        pass

    @abstractmethod
    async def add_user(self, user: User) -> None:
        """
        Create a user and add it to its supplemental groups.

        Raises:
            UserExistsError: If the name already resolves
            CommandError: If the creation or a group-add command fails
        """
        pass

    @abstractmethod
    async def remove_user(self, name: str) -> None:
        """
        Remove a user along with its home directory.

        Raises:
            UserNotFoundError: If the name does not resolve
            CommandError: If the deletion command fails
        """
        pass

    @abstractmethod
    async def set_display_name(self, name: str, display_name: str) -> None:
        pass

    @abstractmethod
    async def set_primary_group(self, name: str, group: str) -> None:
        pass

    @abstractmethod
    async def set_supplemental_groups(self, name: str, groups: List[str]) -> None:
        """Replace the user's supplemental groups; an empty list clears them."""
        pass

    @abstractmethod
    async def set_shell(self, name: str, shell: str) -> None:
        pass

    @abstractmethod
    async def set_pubkeys(self, name: str, pubkeys: List[str]) -> None:
        """Replace the user's SSH public keys."""
        pass

    @abstractmethod
    async def lock_password(self, name: str) -> None:
        """Disable password authentication without removing the account."""
        pass

    @abstractmethod
    async def add_group(self, group: Group) -> None:
        """
        Create a group with an explicit gid.

        Raises:
            GroupExistsError: If the name already resolves
            CommandError: If the creation command fails
        """
        pass

    @abstractmethod
    async def remove_group(self, name: str) -> None:
        """
        Remove a group.

        Raises:
            GroupNotFoundError: If the name does not resolve
            CommandError: If the deletion command fails
        """
        pass

    @property
    def backend_name(self) -> str:
        """Return the backend name."""
        return self.__class__.__name__.replace('Syncer', '').lower()
