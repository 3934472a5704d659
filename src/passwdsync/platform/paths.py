"""
Path handling for files placed under a user's home directory.
"""

import os
from typing import Union


PathLike = Union[str, os.PathLike]


def safe_join(base: PathLike, *parts: PathLike) -> str:
    """
    Safely join paths, preventing path traversal attacks.

    Raises ValueError if the result would escape the base directory.
    """
    base_resolved = os.path.abspath(str(base))
    result = os.path.abspath(os.path.join(base_resolved, *[str(p) for p in parts]))

    # Ensure result is under base
    if not result.startswith(base_resolved + os.sep) and result != base_resolved:
        raise ValueError(f"Path traversal detected: {result} escapes {base_resolved}")

    return result
