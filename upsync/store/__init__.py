# Upsync Store Module
# Remote object store contract and its S3 implementation

from upsync.store.base import (
    MTIME_METADATA_KEY,
    RemoteObject,
    RemoteStore,
    format_mtime,
    parse_mtime,
)
from upsync.store.s3 import S3Store, translate_error

__all__ = [
    # Contract
    "MTIME_METADATA_KEY",
    "RemoteObject",
    "RemoteStore",
    "format_mtime",
    "parse_mtime",
    # S3
    "S3Store",
    "translate_error",
]
