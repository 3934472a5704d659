"""
passwdsync BusyBox syncer

Synchronize local users and groups with the account tools shipped by
BusyBox and similar minimal distributions (adduser, addgroup, usermod,
userdel, groupadd, groupdel).
"""

import asyncio
import logging
from typing import List, Optional

from passwdsync.config import SyncerConfig, get_config
from passwdsync.errors import (
    GroupExistsError,
    GroupNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from passwdsync.models import Command, Group, User
from passwdsync.platform import fs, users
from passwdsync.platform.proc import CommandRunner, run_command, run_to_completion
from passwdsync.syncers.base import Syncer

logger = logging.getLogger(__name__)


class BusyboxSyncer(Syncer):
    """
    Syncer backed by BusyBox-style account tools.

    Create and delete check the account database first, since firing
    them twice would be destructive. Attribute setters rely on usermod
    failing for unknown users. Every mutation runs through
    run_to_completion, so a cancelled caller never leaves a half-applied
    change behind.
    """

    def __init__(
        self,
        run: Optional[CommandRunner] = None,
        config: Optional[SyncerConfig] = None,
    ):
        self.run = run or run_command
        self.config = config or get_config()

    async def lookup_user(self, name: str) -> Optional[User]:
        return await asyncio.to_thread(users.lookup_user, name)

    async def lookup_group(self, name: str) -> Optional[Group]:
        return await asyncio.to_thread(users.lookup_group, name)

    async def add_user(self, user: User) -> None:
        if await asyncio.to_thread(users.user_exists, user.name):
            raise UserExistsError(user.name)

        logger.info("adding user %s (uid %d)", user.name, user.uid)
        await run_to_completion(self._create_user(user))

    async def _create_user(self, user: User) -> None:
        await self.run(Command.of(
            "adduser",
            "-c", user.display_name, "-G", user.group,
            "-s", user.shell, "-u", str(user.uid), "-D",
            user.name,
        ))

        # Memberships are only ever added here; shrinking the set is
        # set_supplemental_groups' job.
        for group_name in user.groups:
            await self.run(Command.of("addgroup", user.name, group_name))

    async def remove_user(self, name: str) -> None:
        if not await asyncio.to_thread(users.user_exists, name):
            raise UserNotFoundError(name)

        logger.info("removing user %s", name)
        await run_to_completion(self.run(Command.of("userdel", "-f", "-r", name)))

    async def _usermod(self, *args: str) -> None:
        await run_to_completion(self.run(Command.of("usermod", *args)))

    async def set_display_name(self, name: str, display_name: str) -> None:
        await self._usermod("-c", display_name, name)

    async def set_primary_group(self, name: str, group: str) -> None:
        await self._usermod("-g", group, name)

    async def set_supplemental_groups(self, name: str, groups: List[str]) -> None:
        await self._usermod("-G", ",".join(groups), name)

    async def set_shell(self, name: str, shell: str) -> None:
        await self._usermod("-s", shell, name)

    async def lock_password(self, name: str) -> None:
        await self._usermod("-L", name)

    async def set_pubkeys(self, name: str, pubkeys: List[str]) -> None:
        pw = await asyncio.to_thread(users.lookup_passwd, name)
        if pw is None:
            raise UserNotFoundError(name)

        logger.info("writing %d public key(s) for %s", len(pubkeys), name)
        await run_to_completion(asyncio.to_thread(
            self._save_pubkeys, pw.pw_dir, int(pw.pw_uid), int(pw.pw_gid), pubkeys,
        ))

    def _save_pubkeys(self, home: str, uid: int, gid: int, pubkeys: List[str]) -> None:
        content = "".join(f"{key}\n" for key in pubkeys)
        fs.write_owned_file_under(
            home, self.config.pubkey_file, content, uid, gid,
            mode=self.config.pubkey_mode, dir_mode=self.config.ssh_dir_mode,
        )

    async def add_group(self, group: Group) -> None:
        if await asyncio.to_thread(users.group_exists, group.name):
            raise GroupExistsError(group.name)

        logger.info("adding group %s (gid %d)", group.name, group.gid)
        await run_to_completion(
            self.run(Command.of("groupadd", "-g", str(group.gid), group.name))
        )

    async def remove_group(self, name: str) -> None:
        if not await asyncio.to_thread(users.group_exists, name):
            raise GroupNotFoundError(name)

        logger.info("removing group %s", name)
        await run_to_completion(self.run(Command.of("groupdel", name)))
