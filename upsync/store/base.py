# Upsync Store Contract
# Remote object model and the operations the sync engine consumes

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Optional

# Sent to S3 as x-amz-meta-mtime
MTIME_METADATA_KEY = "mtime"


def format_mtime(mtime: datetime) -> str:
    """Serialize a modification time for object metadata."""
    return mtime.astimezone(timezone.utc).isoformat()


def parse_mtime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a stored modification time.

    Returns:
        Aware datetime, or None if the value is missing or unparsable.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class RemoteObject:
    """An object in the remote store."""

    key: str
    etag: str
    last_modified: datetime
    metadata: dict[str, str] = field(default_factory=dict)
    size: int = 0

    @property
    def stored_mtime(self) -> Optional[datetime]:
        """Local modification time recorded at upload, if any."""
        return parse_mtime(self.metadata.get(MTIME_METADATA_KEY))

    @property
    def effective_mtime(self) -> datetime:
        """Stored modification time, else the store's last-modified time."""
        return self.stored_mtime or self.last_modified


class RemoteStore(ABC):
    """Operations on one bucket."""

    bucket_name: str

    @abstractmethod
    def list(self, glob: Optional[str] = None) -> Iterator[RemoteObject]:
        """Yield every object, optionally only keys matching a glob.

        Listed objects carry no user metadata; use get_metadata for that.
        """

    @abstractmethod
    def get_metadata(self, key: str) -> Optional[RemoteObject]:
        """Fetch one object's metadata and fingerprint, or None if absent."""

    @abstractmethod
    def put(self, key: str, body: BinaryIO, metadata: dict[str, str], *, public: bool = False) -> None:
        """Create or replace an object's body and metadata."""

    @abstractmethod
    def update_metadata(self, key: str, metadata: dict[str, str], *, public: bool = False) -> None:
        """Replace an object's metadata without transferring its body."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete an object by key."""

    @abstractmethod
    def download(self, key: str, target) -> None:
        """Write an object's body to a local path."""
