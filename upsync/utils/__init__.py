# Upsync Utilities Module
# Helper functions for content hashing and glob matching

from upsync.utils.hashing import FILE_BUFFER_SIZE, file_md5, stream_md5
from upsync.utils.paths import glob_to_regex, matches_glob, relative_key

__all__ = [
    # Hashing
    "FILE_BUFFER_SIZE",
    "file_md5",
    "stream_md5",
    # Paths
    "glob_to_regex",
    "matches_glob",
    "relative_key",
]
