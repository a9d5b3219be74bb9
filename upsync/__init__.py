"""Upsync - mirror a local directory into an S3 bucket.

Uploads only files that changed since the last run and, optionally,
prunes older remote objects with a day/week/month retention schedule.
"""

__version__ = "1.0.0"
__author__ = "Equitania Software GmbH"
__email__ = "info@equitania.de"

__all__ = [
    "__version__",
    "ChangeAction",
    "LocalFile",
    "RemoteObject",
    "RetentionPolicy",
    "StoreSession",
    "SyncExecutor",
    "SyncOutcome",
    "SyncResult",
    "SyncTally",
]


def __getattr__(name: str):
    """Lazy import to avoid loading boto3 during setup."""
    if name in ("SyncExecutor", "SyncOutcome", "SyncResult", "SyncTally"):
        from upsync.sync import executor

        return getattr(executor, name)
    if name == "ChangeAction":
        from upsync.sync.detector import ChangeAction

        return ChangeAction
    if name == "LocalFile":
        from upsync.sync.local import LocalFile

        return LocalFile
    if name == "RetentionPolicy":
        from upsync.sync.retention import RetentionPolicy

        return RetentionPolicy
    if name == "RemoteObject":
        from upsync.store.base import RemoteObject

        return RemoteObject
    if name == "StoreSession":
        from upsync.session import StoreSession

        return StoreSession
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
