# Upsync Hashing Utilities
# Streaming content fingerprints comparable with S3 ETags

import hashlib
from pathlib import Path
from typing import BinaryIO

from upsync.exceptions import LocalIOError

# 40 MiB per read keeps memory flat regardless of file size
FILE_BUFFER_SIZE = 40 * 1024 * 1024


def stream_md5(stream: BinaryIO, *, chunk_size: int = FILE_BUFFER_SIZE) -> str:
    """
    Calculate the MD5 hex digest of a binary stream.

    Args:
        stream: Readable binary stream, consumed to EOF.
        chunk_size: Bytes read per iteration.

    Returns:
        Hex digest of the stream content.
    """
    hasher = hashlib.md5()
    while chunk := stream.read(chunk_size):
        hasher.update(chunk)
    return hasher.hexdigest()


def file_md5(path: Path, *, chunk_size: int = FILE_BUFFER_SIZE) -> str:
    """
    Calculate the MD5 hex digest of a file.

    Single-part S3 uploads report this digest as their ETag, so the
    result can be compared with a remote object without downloading it.

    Args:
        path: Path to file.
        chunk_size: Chunk size for reading large files.

    Returns:
        Hex digest of file content.

    Raises:
        LocalIOError: If the file can't be opened or read.
    """
    try:
        with open(path, "rb") as f:
            return stream_md5(f, chunk_size=chunk_size)
    except OSError as e:
        raise LocalIOError(path, e.strerror or str(e)) from e
