# Copyright (c) 2024 passwdsync Contributors
# MIT License

"""
passwdsync Error Classes.

All custom exceptions for clear error handling and exit codes.
A lookup that finds nothing is not an error; lookups return None instead.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from passwdsync.models import Command


class ExitCode(enum.IntEnum):
    """Exit codes reported by the passwdsync CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    CONFLICT = 2
    NOT_FOUND = 3
    COMMAND_FAILED = 4
    DATABASE_ERROR = 5
    CONFIG_ERROR = 6
    KEYBOARD_INTERRUPT = 130


class PasswdSyncError(Exception):
    """Base exception for all passwdsync errors."""

    exit_code: int = ExitCode.GENERIC_ERROR

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message


class ConflictError(PasswdSyncError):
    """The entity to be created already exists."""

    exit_code: int = ExitCode.CONFLICT

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} exists: {name}")


class UserExistsError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__("user", name)


class GroupExistsError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__("group", name)


class NotFoundError(PasswdSyncError):
    """The entity to be removed or modified does not exist."""

    exit_code: int = ExitCode.NOT_FOUND

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} does not exist: {name}")


class UserNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__("user", name)


class GroupNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__("group", name)


class CommandError(PasswdSyncError):
    """
    An account tool exited non-zero or could not be started.

    The message names the full command line, so the failing step of a
    multi-command operation can be told apart from the others.
    """

    exit_code: int = ExitCode.COMMAND_FAILED

    def __init__(
        self,
        command: "Command",
        message: str,
        rc: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> None:
        self.command = command
        self.rc = rc
        self.stderr = stderr

        details_parts = []
        if rc is not None:
            details_parts.append(f"rc={rc}")
        if stderr:
            details_parts.append(f"stderr: {stderr.strip()[:200]}")

        super().__init__(
            f"Command '{command}' failed: {message}",
            "; ".join(details_parts) if details_parts else None,
        )


class AccountDatabaseError(PasswdSyncError):
    """A local passwd/group entry could not be interpreted."""

    exit_code: int = ExitCode.DATABASE_ERROR

    def __init__(self, message: str, entry: str | None = None) -> None:
        self.entry = entry
        super().__init__(f"Account database error: {message}", entry)


class ConfigError(PasswdSyncError):
    """Error loading or validating a configuration file."""

    exit_code: int = ExitCode.CONFIG_ERROR

    def __init__(self, message: str, file_path: str | None = None) -> None:
        self.file_path = file_path
        self.reason = message
        location = f" in {file_path}" if file_path else ""
        super().__init__(f"Config error{location}: {message}")
