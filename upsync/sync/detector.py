# Upsync Change Detection
# Decide what to do with one local file given its remote counterpart

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from upsync.store.base import RemoteObject
from upsync.sync.local import LocalFile
from upsync.utils.hashing import file_md5

# Absorbs clock and serialization drift between stored and local mtimes
EPSILON = timedelta(seconds=1)


class ChangeAction(str, Enum):
    """Per-file sync actions."""

    CREATE = "create"
    UPDATE_BODY = "update_body"
    UPDATE_METADATA = "update_metadata"
    SKIP = "skip"


@dataclass
class ChangeDecision:
    """The action chosen for a file and why."""

    local: LocalFile
    action: ChangeAction
    reason: str = ""
    local_md5: Optional[str] = None

    @property
    def is_update(self) -> bool:
        return self.action in (ChangeAction.UPDATE_BODY, ChangeAction.UPDATE_METADATA)


def mtimes_match(stored: Optional[datetime], local: datetime) -> bool:
    """Check if two modification times are equal within EPSILON."""
    if stored is None:
        return False
    return abs(stored - local) <= EPSILON


def decide_action(local: LocalFile, remote: Optional[RemoteObject]) -> ChangeDecision:
    """
    Determine what action to take for a local file.

    The content hash is only computed when the timestamps disagree, so an
    unchanged file costs one metadata lookup and no local reads.

    Args:
        local: The local file.
        remote: Remote object with the same key, or None.

    Returns:
        ChangeDecision describing what to do.

    Raises:
        LocalIOError: If the file must be hashed but can't be read.
    """
    if remote is None:
        return ChangeDecision(local=local, action=ChangeAction.CREATE, reason="Not in bucket")

    if mtimes_match(remote.stored_mtime, local.mtime):
        return ChangeDecision(local=local, action=ChangeAction.SKIP, reason="Modification time unchanged")

    local_md5 = file_md5(local.path)
    if local_md5 != remote.etag:
        return ChangeDecision(
            local=local,
            action=ChangeAction.UPDATE_BODY,
            reason="Content changed",
            local_md5=local_md5,
        )

    return ChangeDecision(
        local=local,
        action=ChangeAction.UPDATE_METADATA,
        reason="Content identical, refreshing modification time",
        local_md5=local_md5,
    )
