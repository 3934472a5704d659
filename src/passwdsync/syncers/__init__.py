"""
passwdsync syncers

Backends that apply account changes to the local host.
"""

from typing import Optional

from passwdsync.config import SyncerConfig, get_config
from passwdsync.platform.proc import CommandRunner
from passwdsync.syncers.base import Syncer


def create_syncer(
    name: Optional[str] = None,
    run: Optional[CommandRunner] = None,
    config: Optional[SyncerConfig] = None,
) -> Syncer:
    """
    Create a syncer for the named backend.

    Args:
        name: Backend name; defaults to the configured backend
        run: Command runner to inject instead of real process execution
        config: Configuration; defaults to the current global config

    Raises:
        ValueError: If the backend is unknown
    """
    config = config or get_config()
    name = name or config.backend

    if name == 'busybox':
        from passwdsync.syncers.busybox import BusyboxSyncer
        return BusyboxSyncer(run=run, config=config)

    raise ValueError(f"Unknown syncer backend: {name}")


__all__ = ["Syncer", "create_syncer"]
