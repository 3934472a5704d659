"""
Unit Test Fixtures

Fake account database entries and a recording command runner, so syncer
tests never touch the real passwd/group files.
"""

import grp
import os
import pwd

import pytest

from passwdsync.config import SyncerConfig
from passwdsync.platform import users
from passwdsync.platform.proc import RecordingRunner
from passwdsync.syncers.busybox import BusyboxSyncer


def make_passwd(name, uid, gid, gecos="", home="/nonexistent", shell="/bin/sh"):
    return pwd.struct_passwd((name, "x", uid, gid, gecos, home, shell))


def make_group(name, gid, members=()):
    return grp.struct_group((name, "x", gid, list(members)))


class FakeAccounts:
    """In-memory passwd and group databases patched over pwd/grp."""

    def __init__(self):
        self.passwd = {}
        self.groups = {}

    def add_user(self, name, uid, gid, gecos="", home="/nonexistent", shell="/bin/sh"):
        self.passwd[name] = make_passwd(name, uid, gid, gecos, home, shell)

    def add_group(self, name, gid, members=()):
        self.groups[name] = make_group(name, gid, members)

    def getpwnam(self, name):
        return self.passwd[name]

    def getgrnam(self, name):
        return self.groups[name]

    def getgrgid(self, gid):
        for entry in self.groups.values():
            if entry.gr_gid == gid:
                return entry
        raise KeyError(f"getgrgid(): gid not found: {gid}")

    def getgrouplist(self, name, gid):
        result = [gid]
        for entry in self.groups.values():
            if name in entry.gr_mem:
                result.append(entry.gr_gid)
        return result


@pytest.fixture
def accounts(monkeypatch):
    """Replace the account database seen by passwdsync.platform.users."""
    fake = FakeAccounts()
    monkeypatch.setattr(users.pwd, "getpwnam", fake.getpwnam)
    monkeypatch.setattr(users.grp, "getgrnam", fake.getgrnam)
    monkeypatch.setattr(users.grp, "getgrgid", fake.getgrgid)
    monkeypatch.setattr(users.os, "getgrouplist", fake.getgrouplist)
    return fake


@pytest.fixture
def recorder():
    return RecordingRunner()


@pytest.fixture
def syncer(recorder):
    return BusyboxSyncer(run=recorder, config=SyncerConfig())


@pytest.fixture
def home_user(accounts, tmp_path):
    """A user owned by the test process whose home is a temp directory."""
    home = tmp_path / "home" / "alice"
    home.mkdir(parents=True)
    accounts.add_user("alice", os.getuid(), os.getgid(), "Alice", str(home))
    return home
