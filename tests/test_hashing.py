# Tests for upsync.utils.hashing
# Streaming MD5 fingerprints

import hashlib
from io import BytesIO

import pytest

from upsync.exceptions import LocalIOError
from upsync.utils.hashing import FILE_BUFFER_SIZE, file_md5, stream_md5


class TestStreamMd5:
    """Tests for stream_md5."""

    def test_matches_hashlib(self):
        data = b"hello world"
        assert stream_md5(BytesIO(data)) == hashlib.md5(data).hexdigest()

    def test_empty_stream(self):
        assert stream_md5(BytesIO(b"")) == hashlib.md5(b"").hexdigest()

    def test_chunk_size_does_not_change_digest(self):
        data = bytes(range(256)) * 100
        assert stream_md5(BytesIO(data), chunk_size=7) == stream_md5(BytesIO(data))

    def test_reads_in_bounded_chunks(self):
        reads: list[int] = []

        class Recorder(BytesIO):
            def read(self, size=-1):
                reads.append(size)
                return super().read(size)

        stream_md5(Recorder(b"x" * 25), chunk_size=10)
        assert reads and all(size == 10 for size in reads)

    def test_default_buffer_is_forty_mebibytes(self):
        assert FILE_BUFFER_SIZE == 40 * 1024 * 1024


class TestFileMd5:
    """Tests for file_md5."""

    def test_existing_file(self, temp_dir):
        f = temp_dir / "test.txt"
        f.write_bytes(b"hello")
        assert file_md5(f) == hashlib.md5(b"hello").hexdigest()

    def test_same_content_same_hash(self, temp_dir):
        f1 = temp_dir / "a.txt"
        f2 = temp_dir / "b.txt"
        f1.write_text("same", encoding="utf-8")
        f2.write_text("same", encoding="utf-8")
        assert file_md5(f1) == file_md5(f2)

    def test_missing_file_raises_local_io_error(self, temp_dir):
        with pytest.raises(LocalIOError) as exc_info:
            file_md5(temp_dir / "missing.txt")
        assert exc_info.value.path == temp_dir / "missing.txt"

    def test_directory_raises_local_io_error(self, temp_dir):
        with pytest.raises(LocalIOError):
            file_md5(temp_dir)
