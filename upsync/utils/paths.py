# Upsync Path Utilities
# Glob matching shared by local enumeration and remote pruning

import re
from functools import lru_cache
from pathlib import Path


def relative_key(root: Path, path: Path) -> str:
    """
    Build the store key for a file below the sync root.

    Args:
        root: Sync root directory.
        path: File inside the root.

    Returns:
        Relative path using forward slashes.
    """
    return path.relative_to(root).as_posix()


@lru_cache(maxsize=64)
def glob_to_regex(pattern: str) -> re.Pattern:
    """
    Translate a glob pattern into a compiled regular expression.

    Supported syntax:
        ``**/``  zero or more directories
        ``**``   anything, including ``/``
        ``*``    anything except ``/``
        ``?``    one character except ``/``
        ``[...]`` character class (``[!...]`` negates)

    Args:
        pattern: Glob pattern such as ``**/*.sql.gz``.

    Returns:
        Compiled regex matching whole keys.
    """
    i, n = 0, len(pattern)
    parts: list[str] = []

    while i < n:
        c = pattern[i]
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif c == "*":
            parts.append("[^/]*")
            i += 1
        elif c == "?":
            parts.append("[^/]")
            i += 1
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                parts.append(re.escape(c))
                i += 1
                continue
            body = pattern[i + 1 : end]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append("[" + body.replace("\\", "\\\\") + "]")
            i = end + 1
        else:
            parts.append(re.escape(c))
            i += 1

    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def matches_glob(key: str, pattern: str) -> bool:
    """
    Check if a store key matches a glob pattern.

    Args:
        key: Relative key (forward slashes).
        pattern: Glob pattern.

    Returns:
        True if the whole key matches.
    """
    return glob_to_regex(pattern).match(key) is not None
