"""
Filesystem operations for files owned by managed users.

Files below a user's home directory are reached one component at a time
through directory handles opened with O_NOFOLLOW, so a symlink planted by
the user can neither redirect the write nor the ownership change outside
the home directory. Files are written atomically and handed over to their
owner before they become visible at the target path.
"""

import errno
import logging
import os
import secrets
from typing import List, Union

from .paths import PathLike, safe_join

logger = logging.getLogger(__name__)

_DIR_FLAGS = os.O_RDONLY | os.O_DIRECTORY | os.O_NOFOLLOW | os.O_CLOEXEC
_TMP_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL | os.O_NOFOLLOW | os.O_CLOEXEC


def read_file(path: PathLike, encoding: str = "utf-8") -> str:
    """Read entire file as string."""
    with open(path, "r", encoding=encoding) as f:
        return f.read()


def _components(base: PathLike, rel_path: PathLike) -> List[str]:
    """Split ``rel_path`` into components, rejecting anything leaving ``base``."""
    if os.path.isabs(str(rel_path)):
        raise ValueError(f"Path must be relative: {rel_path}")
    full = safe_join(base, rel_path)
    rel = os.path.relpath(full, os.path.abspath(str(base)))
    if rel == os.curdir:
        raise ValueError(f"Path names the base directory itself: {rel_path}")
    return rel.split(os.sep)


def open_owned_dir(parent_fd: int, name: str, uid: int, gid: int, mode: int) -> int:
    """
    Open directory ``name`` below ``parent_fd``, creating it if missing.

    The directory must not be a symlink. It ends up owned by
    ``uid``/``gid``; a newly created one gets ``mode``, an existing one
    keeps its mode. Returns the open directory handle.
    """
    created = False
    try:
        os.mkdir(name, mode, dir_fd=parent_fd)
        created = True
    except FileExistsError:
        pass

    try:
        fd = os.open(name, _DIR_FLAGS, dir_fd=parent_fd)
    except OSError as e:
        if e.errno == errno.ELOOP:
            raise OSError(errno.ELOOP, "refusing to follow symlink", name) from e
        raise

    try:
        if created:
            os.fchmod(fd, mode)  # mkdir mode is filtered by umask
        st = os.fstat(fd)
        if (st.st_uid, st.st_gid) != (uid, gid):
            os.fchown(fd, uid, gid)
    except BaseException:
        os.close(fd)
        raise
    return fd


def write_owned_file_at(
    dir_fd: int,
    name: str,
    content: Union[str, bytes],
    uid: int,
    gid: int,
    mode: int = 0o600,
    encoding: str = "utf-8",
) -> None:
    """
    Atomically replace ``name`` in ``dir_fd`` with ``content``.

    The temporary file is created next to the target, owned and
    moded before it is renamed into place. Whatever was at the target
    before (a file, a symlink) is replaced as a whole, never written
    through.
    """
    data = content if isinstance(content, bytes) else content.encode(encoding)
    tmp_name = f".tmp_{secrets.token_hex(8)}"

    fd = os.open(tmp_name, _TMP_FLAGS, 0o600, dir_fd=dir_fd)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fchmod(f.fileno(), mode)
            os.fchown(f.fileno(), uid, gid)
            os.fsync(f.fileno())
        os.rename(tmp_name, name, src_dir_fd=dir_fd, dst_dir_fd=dir_fd)
    except BaseException:
        try:
            os.unlink(tmp_name, dir_fd=dir_fd)
        except FileNotFoundError:
            pass
        raise


def write_owned_file_under(
    base: PathLike,
    rel_path: PathLike,
    content: Union[str, bytes],
    uid: int,
    gid: int,
    mode: int = 0o600,
    dir_mode: int = 0o700,
) -> None:
    """
    Write ``content`` to ``base/rel_path`` without leaving ``base``.

    Intermediate directories are created with ``dir_mode`` and, like the
    file, owned by ``uid``/``gid``. A symlink anywhere below ``base``
    raises OSError(ELOOP); nothing outside ``base`` is written or chowned.
    """
    parts = _components(base, rel_path)
    *dir_names, file_name = parts

    fds = [os.open(str(base), os.O_RDONLY | os.O_DIRECTORY | os.O_CLOEXEC)]
    try:
        for name in dir_names:
            fds.append(open_owned_dir(fds[-1], name, uid, gid, dir_mode))
        write_owned_file_at(fds[-1], file_name, content, uid, gid, mode=mode)
    finally:
        for fd in reversed(fds):
            os.close(fd)

    logger.debug("wrote %s/%s (owner %d:%d)", base, rel_path, uid, gid)
