"""
Tests for ContentStreamer.

Tests focus on:
- Complete delivery of asset bytes through the pipe
- open_content returning before the transfer finishes
- Exactly one access notification per open
- Consumer closing early stops the transfer
- Source read failures truncate the stream instead of raising
"""

import io
import shutil
import tempfile
import threading
from pathlib import Path

import pytest

from memedocs.stores.assets import AssetStore, DirectoryAssetStore
from memedocs.vfs.errors import NotFoundError, TransferInterruptedError
from memedocs.vfs.streamer import ContentStreamer, ReadableHandle


BIG_SIZE = 4 * 1024 * 1024


def make_bytes(size: int) -> bytes:
    return (bytes(range(256)) * (size // 256 + 1))[:size]


class FailingReader(io.RawIOBase):
    """Stream that yields some bytes and then fails."""

    def __init__(self, good: bytes):
        self._good = io.BytesIO(good)

    def readable(self):
        return True

    def read(self, size=-1):
        chunk = self._good.read(size)
        if not chunk:
            raise OSError("disk went away")
        return chunk


class GatedReader(io.RawIOBase):
    """Stream that blocks until released."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)
        self.release = threading.Event()

    def readable(self):
        return True

    def read(self, size=-1):
        self.release.wait(timeout=10)
        return self._data.read(size)


class StubStore(AssetStore):
    """Store serving one prepared stream."""

    def __init__(self, stream):
        self.stream = stream

    def list(self, path):
        raise FileNotFoundError(path)

    def open(self, path):
        return self.stream


@pytest.fixture
def asset_dir():
    """Asset tree with a small and a large image."""
    temp_dir = tempfile.mkdtemp()
    root = Path(temp_dir)
    (root / "Memes" / "Cats").mkdir(parents=True)
    (root / "Memes" / "Cats" / "Grumpy Cat.jpg").write_bytes(make_bytes(1000))
    (root / "Memes" / "Cats" / "Big Cat.png").write_bytes(make_bytes(BIG_SIZE))
    (root / "Memes" / "Cats" / "Empty.gif").write_bytes(b"")

    yield root

    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def accesses():
    return []


@pytest.fixture
def streamer(asset_dir, accesses):
    return ContentStreamer(DirectoryAssetStore(asset_dir), on_access=accesses.append, chunk_size=1024)


class TestDelivery:
    """Test that bytes arrive intact."""

    def test_small_file(self, streamer):
        with streamer.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
            assert isinstance(handle, ReadableHandle)
            data = handle.read()
        assert data == make_bytes(1000)

    def test_large_file_larger_than_pipe_buffer(self, streamer):
        with streamer.open_content("Memes/Cats/Big Cat.png") as handle:
            total = sum(len(chunk) for chunk in handle.iter_chunks(65536))
        assert total == BIG_SIZE

        handle.transfer.join(timeout=10)
        assert handle.transfer.done
        assert handle.transfer.error is None
        assert handle.transfer.bytes_copied == BIG_SIZE

    def test_empty_file(self, streamer):
        with streamer.open_content("Memes/Cats/Empty.gif") as handle:
            assert handle.read() == b""

    def test_iterating_handle(self, streamer):
        handle = streamer.open_content("Memes/Cats/Grumpy Cat.jpg")
        chunks = list(handle)
        handle.close()
        assert b"".join(chunks) == make_bytes(1000)
        assert handle.closed

    def test_handle_reports_document(self, streamer):
        with streamer.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
            assert handle.document_id == "Memes/Cats/Grumpy Cat.jpg"
            handle.read()


class TestNonBlocking:
    """Test that open_content returns before the transfer completes."""

    def test_returns_while_source_blocked(self, accesses):
        source = GatedReader(b"slow bytes")
        streamer = ContentStreamer(StubStore(source), on_access=accesses.append)

        handle = streamer.open_content("Memes/Slow.jpg")
        assert not handle.transfer.done

        source.release.set()
        assert handle.read() == b"slow bytes"
        handle.close()
        handle.transfer.join(timeout=10)
        assert handle.transfer.done


class TestAccessNotification:
    """Test the recents side effect."""

    def test_exactly_once_per_open(self, streamer, accesses):
        with streamer.open_content("Memes/Cats/Big Cat.png") as handle:
            handle.read()
        handle.transfer.join(timeout=10)
        assert accesses == ["Memes/Cats/Big Cat.png"]

    def test_once_per_call(self, streamer, accesses):
        for _ in range(3):
            with streamer.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
                handle.read()
            handle.transfer.join(timeout=10)
        assert accesses == ["Memes/Cats/Grumpy Cat.jpg"] * 3

    def test_recorded_even_if_transfer_fails(self, accesses):
        streamer = ContentStreamer(StubStore(FailingReader(b"abc")), on_access=accesses.append)
        with streamer.open_content("Memes/Broken.jpg") as handle:
            handle.read()
        handle.transfer.join(timeout=10)
        assert accesses == ["Memes/Broken.jpg"]

    def test_not_recorded_when_open_fails(self, streamer, accesses):
        with pytest.raises(NotFoundError):
            streamer.open_content("Memes/Cats/Nope.jpg")
        assert accesses == []

    def test_notification_failure_does_not_break_transfer(self, asset_dir):
        def explode(document_id):
            raise OSError("prefs unavailable")

        streamer = ContentStreamer(DirectoryAssetStore(asset_dir), on_access=explode)
        with streamer.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
            assert handle.read() == make_bytes(1000)


class TestFailures:
    """Test failure behavior."""

    def test_missing_document_raises_not_found(self, streamer):
        with pytest.raises(NotFoundError):
            streamer.open_content("Memes/Cats/Nope.jpg")

    def test_directory_raises_not_found(self, streamer):
        with pytest.raises(NotFoundError):
            streamer.open_content("Memes/Cats")

    def test_source_error_truncates_stream(self):
        streamer = ContentStreamer(StubStore(FailingReader(b"partial")))
        handle = streamer.open_content("Memes/Broken.jpg")
        assert handle.read() == b"partial"
        handle.close()

        handle.transfer.join(timeout=10)
        assert isinstance(handle.transfer.error, TransferInterruptedError)

    def test_consumer_closing_early_stops_transfer(self, streamer):
        handle = streamer.open_content("Memes/Cats/Big Cat.png")
        assert len(handle.read(10)) == 10
        handle.close()

        handle.transfer.join(timeout=10)
        assert handle.transfer.done
        assert isinstance(handle.transfer.error, TransferInterruptedError)
        assert handle.transfer.bytes_copied < BIG_SIZE

    def test_invalid_chunk_size(self, asset_dir):
        with pytest.raises(ValueError):
            ContentStreamer(DirectoryAssetStore(asset_dir), chunk_size=0)
