"""
Process execution for account tools.

A command runner is any coroutine function taking a Command and returning
None on success or raising CommandError. run_command is the real one;
RecordingRunner stands in for it in dry runs and tests.
"""

import asyncio
import logging
import os
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

from passwdsync.errors import CommandError
from passwdsync.models import Command

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Type aliases
CommandRunner = Callable[[Command], Awaitable[None]]


async def run_command(command: Command, encoding: str = "utf-8") -> None:
    """
    Run a command to completion without a shell.

    Args:
        command: Program and arguments to execute
        encoding: Encoding used to decode captured output for logging

    Raises:
        CommandError: If the program exits non-zero or cannot be started
    """
    logger.info("running: %s", command)

    try:
        process = await asyncio.create_subprocess_exec(
            *command.argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=os.environ.copy(),
        )
    except FileNotFoundError as e:
        raise CommandError(command, f"command not found: {command.program}") from e
    except OSError as e:
        raise CommandError(command, str(e)) from e

    stdout_bytes, stderr_bytes = await process.communicate()
    stdout = stdout_bytes.decode(encoding, errors="replace") if stdout_bytes else ""
    stderr = stderr_bytes.decode(encoding, errors="replace") if stderr_bytes else ""

    if stdout:
        logger.debug("%s stdout: %s", command.program, stdout.rstrip())
    if stderr:
        logger.debug("%s stderr: %s", command.program, stderr.rstrip())

    if process.returncode != 0:
        raise CommandError(
            command,
            "non-zero exit status",
            rc=process.returncode,
            stderr=stderr,
        )


class RecordingRunner:
    """
    Command runner that records commands instead of executing them.

    Every command is appended to ``commands`` as its space-joined argv.
    Programs listed in ``fail`` raise CommandError after being recorded,
    which lets callers exercise failure paths.
    """

    def __init__(self, fail: Optional[Iterable[str]] = None):
        self.commands: List[str] = []
        self.fail = set(fail or ())

    async def __call__(self, command: Command) -> None:
        logger.info("dry-run: %s", command)
        self.commands.append(str(command))
        if command.program in self.fail:
            raise CommandError(command, "simulated failure", rc=1)


async def run_to_completion(aw: Awaitable[T]) -> T:
    """
    Await ``aw`` without letting the caller's cancellation interrupt it.

    The work runs in its own task. If the calling task is cancelled while
    waiting, the work keeps going; once it has finished, CancelledError is
    raised in the caller. Errors raised by the work itself propagate as-is.
    """
    task = asyncio.ensure_future(aw)
    cancelled = False
    while True:
        try:
            result = await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.done():
                if not task.cancelled():
                    task.result()
                raise
            cancelled = True
            logger.warning("cancellation requested during mutation; waiting for it to finish")
            continue
        break
    if cancelled:
        raise asyncio.CancelledError()
    return result
