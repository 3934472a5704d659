"""
Account database lookups.

Read-only queries against the live passwd and group databases (through
NSS, so LDAP or sssd backed entries resolve too). A name that does not
resolve gives None, never an exception.
"""

import grp
import logging
import os
import pwd
from typing import Any, List, Optional

from passwdsync.errors import AccountDatabaseError
from passwdsync.models import Group, User

logger = logging.getLogger(__name__)


def _parse_id(value: Any, what: str, entry: str) -> int:
    """Convert a textual or numeric id from the database into an int."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise AccountDatabaseError(f"malformed {what} {value!r}", entry) from None


def lookup_passwd(name: str) -> Optional[pwd.struct_passwd]:
    """Return the raw passwd entry for ``name``, or None if it does not exist."""
    try:
        return pwd.getpwnam(name)
    except KeyError:
        return None


def _group_name(gid: int, entry: str) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        raise AccountDatabaseError(f"no group entry for gid {gid}", entry) from None


def _display_name(gecos: str) -> str:
    # Only the first GECOS field holds the full name.
    return gecos.split(",", 1)[0]


def lookup_user(name: str) -> Optional[User]:
    """
    Resolve ``name`` to a User.

    Returns None if the user is unknown. The primary group is reported by
    name; supplemental groups come from the group database in the order
    getgrouplist(3) gives them, with the primary group left out.
    """
    pw = lookup_passwd(name)
    if pw is None:
        logger.debug("user %s not found", name)
        return None

    entry = f"passwd:{name}"
    uid = _parse_id(pw.pw_uid, "uid", entry)
    gid = _parse_id(pw.pw_gid, "gid", entry)

    groups: List[str] = []
    for sup_gid in os.getgrouplist(pw.pw_name, gid):
        if sup_gid == gid:
            continue
        group_name = _group_name(sup_gid, entry)
        if group_name not in groups:
            groups.append(group_name)

    return User(
        name=pw.pw_name,
        uid=uid,
        display_name=_display_name(pw.pw_gecos),
        group=_group_name(gid, entry),
        shell=pw.pw_shell,
        groups=groups,
    )


def lookup_group(name: str) -> Optional[Group]:
    """
    Resolve ``name`` to a Group.

    Returns None if the group is unknown. A gid that is not numeric means
    the local database is corrupt and raises AccountDatabaseError.
    """
    try:
        gr = grp.getgrnam(name)
    except KeyError:
        logger.debug("group %s not found", name)
        return None

    gid = _parse_id(gr.gr_gid, "gid", f"group:{name}")
    return Group(name=gr.gr_name, gid=gid)


def user_exists(username: str) -> bool:
    """Check if a user exists on the system."""
    return lookup_passwd(username) is not None


def group_exists(name: str) -> bool:
    """Check if a group exists on the system."""
    try:
        grp.getgrnam(name)
        return True
    except KeyError:
        return False
