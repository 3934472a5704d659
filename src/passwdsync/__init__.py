# Copyright (c) 2024 passwdsync Contributors
# MIT License

"""
passwdsync: local account convergence for directory-driven hosts.

Brings a host's users, groups and SSH public keys in line with records
from an external directory, one entity at a time, by driving the
BusyBox-style account tools (adduser, usermod, groupadd, ...).

This package exposes the data model, the syncer factory and release metadata.
"""

from __future__ import annotations

from passwdsync.release import __version__, __author__, __codename__
from passwdsync.models import Command, Group, User
from passwdsync.syncers import Syncer, create_syncer

__all__ = [
    "__version__",
    "__author__",
    "__codename__",
    "Command",
    "Group",
    "User",
    "Syncer",
    "create_syncer",
]
