# Upsync Local Files
# Glob-based enumeration of the directory being mirrored

import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from upsync.exceptions import ConfigurationError, LocalIOError
from upsync.utils.paths import matches_glob, relative_key


@dataclass
class LocalFile:
    """A file below the sync root."""

    key: str
    path: Path
    mtime: datetime

    def open(self) -> BinaryIO:
        """Open the file for binary reading."""
        try:
            return open(self.path, "rb")
        except OSError as e:
            raise LocalIOError(self.path, e.strerror or str(e)) from e


def validate_root(directory: str | Path) -> Path:
    """
    Check that the sync root exists and is a directory.

    Returns:
        Absolute root path.

    Raises:
        ConfigurationError: If it doesn't exist or isn't a directory.
    """
    root = Path(directory).expanduser()
    if not root.exists() or not root.is_dir():
        raise ConfigurationError(f"'{directory}' does not exist or is not a directory.")
    return root.resolve()


def enumerate_files(root: Path, pattern: str = "**/*") -> list[LocalFile]:
    """
    Find files below root whose relative key matches pattern.

    Directories are never returned, nor are files removed while the
    tree is being walked. Results are sorted by key so runs are
    deterministic.

    Args:
        root: Sync root directory.
        pattern: Glob matched against the relative key.

    Returns:
        List of LocalFile.

    Raises:
        LocalIOError: If a matching file can't be inspected.
    """
    files: list[LocalFile] = []

    for path in root.rglob("*"):
        key = relative_key(root, path)
        if not matches_glob(key, pattern):
            continue
        try:
            info = path.stat()
        except FileNotFoundError:
            # Removed since the directory was listed
            continue
        except OSError as e:
            raise LocalIOError(path, e.strerror or str(e)) from e
        if not stat.S_ISREG(info.st_mode):
            continue
        mtime = datetime.fromtimestamp(info.st_mtime, tz=timezone.utc)
        files.append(LocalFile(key=key, path=path, mtime=mtime))

    files.sort(key=lambda f: f.key)
    return files
