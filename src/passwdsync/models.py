# Copyright (c) 2024 passwdsync Contributors
# MIT License

"""
passwdsync data model

Desired or observed state of local accounts, and the description of a
single account-tool invocation.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class User:
    """One local user account."""

    name: str
    uid: int
    display_name: str = ""
    group: str = ""
    shell: str = ""
    groups: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Group:
    """One local group."""

    name: str
    gid: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Command:
    """
    A single account-tool invocation.

    Built fresh for every mutation and handed to a command runner.
    str() gives the space-joined argv, which is what logs, errors and
    recording runners show.
    """

    program: str
    args: Tuple[str, ...] = ()

    @classmethod
    def of(cls, program: str, *args: str) -> "Command":
        return cls(program, tuple(args))

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return " ".join(self.argv)
