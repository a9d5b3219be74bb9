# Upsync Test Fixtures
# Pytest fixtures for upsync tests

import os
import tempfile
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from upsync.store.base import MTIME_METADATA_KEY, format_mtime
from upsync.store.s3 import S3Store

BUCKET = "test-bucket"


def write_file(root: Path, key: str, content: str | bytes, mtime: datetime) -> Path:
    """Write a file below root and set its modification time."""
    path = root / key
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode("utf-8")
    path.write_bytes(content)
    stamp = mtime.timestamp()
    os.utime(path, (stamp, stamp))
    return path


def put_remote(client, key: str, content: bytes, mtime: datetime | None = None) -> None:
    """Create an object directly in the mocked bucket."""
    metadata = {MTIME_METADATA_KEY: format_mtime(mtime)} if mtime is not None else {}
    client.put_object(Bucket=BUCKET, Key=key, Body=content, Metadata=metadata)


def remote_keys(client) -> list[str]:
    """All keys in the mocked bucket, sorted."""
    response = client.list_objects_v2(Bucket=BUCKET)
    return sorted(obj["Key"] for obj in response.get("Contents", []))


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sync_root(temp_dir: Path) -> Path:
    """Create the local directory being mirrored."""
    root = temp_dir / "root"
    root.mkdir()
    return root


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake credentials so nothing can reach a real account."""
    for name in ("KEY", "SECRET", "UPSYNC_CONFIG", "AWS_PROFILE", "AWS_SESSION_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def s3_client(aws_credentials) -> Generator:
    """Mocked S3 client with an empty test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def store(s3_client) -> S3Store:
    """Store bound to the mocked test bucket."""
    return S3Store(s3_client, BUCKET)
