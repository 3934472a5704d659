# Copyright (c) 2024 passwdsync Contributors
# MIT License

"""
passwdsync Configuration

Settings shared by the syncers and the CLI.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from passwdsync.errors import ConfigError


DEFAULT_CONFIG_PATH = "/etc/passwdsync.yml"


@dataclass
class SyncerConfig:
    """
    Configuration for account synchronization.

    Attributes:
        backend: Name of the syncer backend to use
        pubkey_file: Public key file, relative to the user's home directory
        pubkey_mode: Permission bits for the public key file
        ssh_dir_mode: Permission bits for a newly created key directory
        dry_run: Record commands instead of running them
    """

    backend: str = "busybox"
    pubkey_file: str = ".ssh/authorized_keys"
    pubkey_mode: int = 0o600
    ssh_dir_mode: int = 0o700
    dry_run: bool = False

    def __post_init__(self) -> None:
        self.pubkey_mode = _parse_mode(self.pubkey_mode, "pubkey_mode")
        self.ssh_dir_mode = _parse_mode(self.ssh_dir_mode, "ssh_dir_mode")
        if not self.pubkey_file or Path(self.pubkey_file).is_absolute():
            raise ConfigError(
                f"pubkey_file must be a path relative to the home directory, got {self.pubkey_file!r}"
            )


def _parse_mode(value: Union[int, str], key: str) -> int:
    """Accept modes as ints (0o600) or octal strings ("0600")."""
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an octal mode, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 8)
    except ValueError:
        raise ConfigError(f"{key} must be an octal mode, got {value!r}") from None


def load_config(path: Union[str, Path]) -> SyncerConfig:
    """
    Load a SyncerConfig from a YAML file.

    An empty file gives the defaults. Unknown keys are rejected.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(str(e), str(path)) from e

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError("top level must be a mapping", str(path))

    known = {f.name for f in fields(SyncerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown keys: {', '.join(unknown)}", str(path))

    try:
        return SyncerConfig(**data)
    except ConfigError as e:
        raise ConfigError(e.reason, str(path)) from e


# Default configuration
_config = SyncerConfig()


def get_config() -> SyncerConfig:
    """Get the current configuration."""
    return _config


def set_config(config: SyncerConfig) -> None:
    """Set the configuration."""
    global _config
    _config = config


def configure(**kwargs: Any) -> None:
    """Update individual configuration settings."""
    global _config
    values: Dict[str, Any] = {f.name: getattr(_config, f.name) for f in fields(SyncerConfig)}
    for key, value in kwargs.items():
        if key not in values:
            raise ConfigError(f"unknown setting: {key}")
        values[key] = value
    _config = SyncerConfig(**values)
