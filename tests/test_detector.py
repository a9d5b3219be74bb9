# Tests for upsync.sync.detector
# Per-file action selection

import hashlib
from datetime import timedelta
from unittest.mock import patch

import pytest

from conftest import utc, write_file

from upsync.exceptions import LocalIOError
from upsync.store.base import MTIME_METADATA_KEY, RemoteObject, format_mtime
from upsync.sync.detector import EPSILON, ChangeAction, decide_action, mtimes_match
from upsync.sync.local import LocalFile

MTIME = utc(2024, 1, 1)


@pytest.fixture
def local(sync_root) -> LocalFile:
    path = write_file(sync_root, "a.txt", "hello", MTIME)
    return LocalFile(key="a.txt", path=path, mtime=MTIME)


def _remote(etag: str, metadata: dict | None = None) -> RemoteObject:
    return RemoteObject(key="a.txt", etag=etag, last_modified=utc(2024, 2, 1), metadata=metadata or {})


HELLO_MD5 = hashlib.md5(b"hello").hexdigest()


class TestMtimesMatch:
    """Tests for mtimes_match."""

    def test_within_epsilon(self):
        assert mtimes_match(MTIME + EPSILON, MTIME)
        assert mtimes_match(MTIME - timedelta(milliseconds=300), MTIME)

    def test_beyond_epsilon(self):
        assert not mtimes_match(MTIME + EPSILON + timedelta(microseconds=1), MTIME)

    def test_missing(self):
        assert not mtimes_match(None, MTIME)


class TestDecideAction:
    """Tests for decide_action."""

    def test_create_when_remote_missing(self, local):
        decision = decide_action(local, None)
        assert decision.action == ChangeAction.CREATE
        assert not decision.is_update

    def test_skip_never_reads_the_file(self, local):
        remote = _remote("different", {MTIME_METADATA_KEY: format_mtime(MTIME + timedelta(milliseconds=500))})
        with patch("upsync.sync.detector.file_md5") as mock_md5:
            decision = decide_action(local, remote)
        assert decision.action == ChangeAction.SKIP
        mock_md5.assert_not_called()

    def test_metadata_only_when_content_identical(self, local):
        remote = _remote(HELLO_MD5, {MTIME_METADATA_KEY: format_mtime(MTIME - timedelta(days=3))})
        decision = decide_action(local, remote)
        assert decision.action == ChangeAction.UPDATE_METADATA
        assert decision.is_update
        assert decision.local_md5 == HELLO_MD5

    def test_body_update_when_content_differs(self, local):
        remote = _remote(hashlib.md5(b"other").hexdigest(), {MTIME_METADATA_KEY: format_mtime(MTIME - timedelta(days=3))})
        decision = decide_action(local, remote)
        assert decision.action == ChangeAction.UPDATE_BODY
        assert decision.is_update

    def test_absent_mtime_falls_back_to_fingerprint(self, local):
        assert decide_action(local, _remote(HELLO_MD5)).action == ChangeAction.UPDATE_METADATA

    def test_unparsable_mtime_counts_as_absent(self, local):
        remote = _remote(HELLO_MD5, {MTIME_METADATA_KEY: "last tuesday"})
        assert decide_action(local, remote).action == ChangeAction.UPDATE_METADATA

    def test_multipart_etag_never_matches(self, local):
        remote = _remote(f"{HELLO_MD5}-2")
        assert decide_action(local, remote).action == ChangeAction.UPDATE_BODY

    def test_unreadable_file_raises(self, local):
        local.path.unlink()
        with pytest.raises(LocalIOError):
            decide_action(local, _remote(HELLO_MD5))
