"""Non-blocking content delivery through OS pipes.

``open_content`` returns the read end of a pipe straight away and a
background thread copies the asset into the write end. The pipe buffer
provides backpressure: a slow consumer only stalls its own transfer.
When the consumer closes its end early the next write fails with
BrokenPipeError and the transfer stops, releasing the asset.
"""

import logging
import os
import threading
from typing import BinaryIO, Callable, Iterator, Optional

from memedocs.stores.assets import AssetStore
from memedocs.vfs.errors import DocumentError, NotFoundError, TransferInterruptedError

logger = logging.getLogger(__name__)


DEFAULT_CHUNK_SIZE = 8192


class TransferTask(threading.Thread):
    """Background copy of one asset into a pipe.

    Attributes:
        document_id: Document being transferred
        bytes_copied: Bytes written to the pipe so far
        error: TransferInterruptedError if the copy failed, else None
    """

    def __init__(
        self,
        document_id: str,
        source: BinaryIO,
        sink_fd: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_access: Optional[Callable[[str], object]] = None,
    ):
        """Initialize the transfer.

        Args:
            document_id: Document being transferred
            source: Open asset stream (closed by the task)
            sink_fd: Write end of the pipe (closed by the task)
            chunk_size: Bytes per read/write
            on_access: Called once with the document id when the task runs
        """
        super().__init__(name=f"transfer:{document_id}", daemon=True)
        self.document_id = document_id
        self.chunk_size = chunk_size
        self.bytes_copied = 0
        self.error: Optional[TransferInterruptedError] = None
        self._source = source
        self._sink = os.fdopen(sink_fd, "wb", buffering=0)
        self._on_access = on_access
        self._finished = threading.Event()

    @property
    def done(self) -> bool:
        """Whether the transfer has finished, successfully or not."""
        return self._finished.is_set()

    def run(self) -> None:
        try:
            self._notify_access()
            self._copy()
        finally:
            self._close()
            self._finished.set()

    def _notify_access(self) -> None:
        if self._on_access is None:
            return
        try:
            self._on_access(self.document_id)
        except (DocumentError, OSError) as e:
            logger.warning(f"Failed to record access to {self.document_id}: {e}")

    def _copy(self) -> None:
        try:
            while True:
                chunk = self._source.read(self.chunk_size)
                if not chunk:
                    break
                self._write_all(chunk)
        except (OSError, ValueError) as e:
            self.error = TransferInterruptedError(
                f"Transfer of {self.document_id} stopped after {self.bytes_copied} bytes: {e}"
            )
            self.error.__cause__ = e
            if isinstance(e, BrokenPipeError):
                logger.info(f"Consumer closed {self.document_id} after {self.bytes_copied} bytes")
            else:
                logger.error(f"Exception while transferring {self.document_id}", exc_info=True)
            return

        logger.debug(f"Transferred {self.bytes_copied} bytes of {self.document_id}")

    def _write_all(self, chunk: bytes) -> None:
        view = memoryview(chunk)
        while view:
            written = self._sink.write(view)
            if written is None:
                continue
            self.bytes_copied += written
            view = view[written:]

    def _close(self) -> None:
        for stream in (self._source, self._sink):
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"Error closing stream for {self.document_id}: {e}")


class ReadableHandle:
    """Consumer end of a content pipe.

    Reads block until the transfer supplies data and return b"" at the
    end of the stream. A failed transfer shows up as an early end of
    stream; see ``transfer.error``.
    """

    def __init__(self, read_fd: int, transfer: TransferTask):
        self._reader = os.fdopen(read_fd, "rb")
        self.transfer = transfer

    @property
    def document_id(self) -> str:
        return self.transfer.document_id

    @property
    def closed(self) -> bool:
        return self._reader.closed

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def readinto(self, buffer) -> int:
        return self._reader.readinto(buffer)

    def iter_chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the stream in chunks of at most ``size`` bytes."""
        while True:
            chunk = self._reader.read1(size)
            if not chunk:
                return
            yield chunk

    def fileno(self) -> int:
        return self._reader.fileno()

    def close(self) -> None:
        """Stop reading. An unfinished transfer will stop on its next write."""
        self._reader.close()

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_chunks()

    def __enter__(self) -> "ReadableHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ReadableHandle(document_id='{self.document_id}', closed={self.closed})"


class ContentStreamer:
    """Opens assets and relays them through pipes on background threads."""

    def __init__(
        self,
        store: AssetStore,
        on_access: Optional[Callable[[str], object]] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize the streamer.

        Args:
            store: Asset store to read from
            on_access: Called once per successful open (e.g. recording recents)
            chunk_size: Bytes per copy step
        """
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.store = store
        self.on_access = on_access
        self.chunk_size = chunk_size

    def open_content(self, document_id: str) -> ReadableHandle:
        """Open a document and start streaming it.

        Returns as soon as the transfer thread is started.

        Args:
            document_id: File to open

        Returns:
            ReadableHandle for the document's bytes

        Raises:
            NotFoundError: If the id does not resolve to a readable asset
        """
        try:
            source = self.store.open(document_id)
        except OSError as e:
            logger.error(f"Exception in open_content for {document_id}: {e}")
            raise NotFoundError(f"No such document: {document_id}") from e

        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            source.close()
            logger.error(f"Failed to create pipe for {document_id}: {e}")
            raise NotFoundError(f"Cannot stream document: {document_id}") from e

        transfer = TransferTask(
            document_id,
            source,
            write_fd,
            chunk_size=self.chunk_size,
            on_access=self.on_access,
        )
        handle = ReadableHandle(read_fd, transfer)
        transfer.start()
        return handle
