"""DocumentsBridge - entry point for document tree access."""

import logging
from typing import BinaryIO, List, Optional

from memedocs.config import get_prefs_path
from memedocs.stores.assets import AssetStore, open_asset_store
from memedocs.stores.prefs import JsonPreferenceStore, PreferenceStore
from memedocs.vfs.base import DocumentMetadata, RootDescriptor
from memedocs.vfs.errors import InvalidArgumentError, NotFoundError
from memedocs.vfs.query import TreeQuery
from memedocs.vfs.recents import MAX_RECENTS, RecentsLedger
from memedocs.vfs.search import SearchEngine
from memedocs.vfs.streamer import DEFAULT_CHUNK_SIZE, ContentStreamer, ReadableHandle

logger = logging.getLogger(__name__)


DEFAULT_ROOT_ID = "Memes"


class DocumentsBridge:
    """Document tree over a read-only asset store.

    This is the main entry point used by protocol adapters (the CLI and
    the HTTP server). It holds no state of its own; every operation is
    delegated to the query, search, recents and streaming components.

    Usage:
        >>> bridge = DocumentsBridge(DirectoryAssetStore("assets"), JsonPreferenceStore("prefs.json"))
        >>> bridge.list_roots()[0].document_id
        'Memes'
        >>> [doc.display_name for doc in bridge.list_children("Memes")]
        ['Cats', 'Dogs']
        >>> with bridge.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
        ...     data = handle.read()
    """

    def __init__(
        self,
        store: AssetStore,
        prefs: PreferenceStore,
        root_id: str = DEFAULT_ROOT_ID,
        title: Optional[str] = None,
        recents_capacity: int = MAX_RECENTS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize the bridge.

        Args:
            store: Asset store holding the documents
            prefs: Preference store used to persist recents
            root_id: Document id of the single root ("" for the store root)
            title: Root title shown to the user (default: root id)
            recents_capacity: Maximum number of recent documents
            chunk_size: Bytes per copy step when streaming
        """
        self.store = store
        self.root_id = root_id
        self.title = title or root_id or "Assets"
        self.recents = RecentsLedger(prefs, capacity=recents_capacity)
        self.tree = TreeQuery(store, root_id, root_title=self.title, ledger=self.recents)
        self.searcher = SearchEngine(self.tree)
        self.streamer = ContentStreamer(
            store,
            on_access=self.recents.record_access,
            chunk_size=chunk_size,
        )

    @classmethod
    def from_config(cls, config) -> "DocumentsBridge":
        """Build a bridge from a MemedocsConfig.

        Raises:
            FileNotFoundError: If no asset location is configured or it is missing
        """
        if not config.assets.path:
            raise FileNotFoundError("No asset location configured")

        return cls(
            open_asset_store(config.assets.path),
            JsonPreferenceStore(get_prefs_path(config)),
            root_id=config.assets.root_id,
            title=config.assets.title,
            recents_capacity=config.recents.capacity,
            chunk_size=config.stream.chunk_size,
        )

    def list_roots(self) -> List[RootDescriptor]:
        """List the browsable roots (always exactly one)."""
        logger.debug("list_roots")
        return [
            RootDescriptor(
                root_id=self.root_id,
                title=self.title,
                document_id=self.root_id,
            )
        ]

    def get_document(self, document_id: str) -> DocumentMetadata:
        """Get metadata for one document.

        Raises:
            InvalidArgumentError: If the id is missing
            NotFoundError: If the document is a directory that does not exist
        """
        logger.debug(f"get_document {document_id}")
        self._check_id(document_id)
        return self.tree.get_metadata(document_id)

    def list_children(self, parent_id: str) -> List[DocumentMetadata]:
        """List the children of a directory in store order.

        Raises:
            InvalidArgumentError: If the id is missing
            NotFoundError: If the directory does not exist
        """
        logger.debug(f"list_children {parent_id}")
        self._check_id(parent_id)
        return self.tree.list_children(parent_id)

    def open_content(self, document_id: str) -> ReadableHandle:
        """Stream a document's bytes.

        The returned handle is readable immediately; the copy runs in the
        background and records the document in recents.

        Raises:
            InvalidArgumentError: If the id is missing
            NotFoundError: If the document cannot be opened
        """
        logger.debug(f"open_content {document_id}")
        self._check_id(document_id)
        return self.streamer.open_content(document_id)

    def open_thumbnail(self, document_id: str) -> BinaryIO:
        """Open a document's thumbnail.

        Assets are small images, so the asset itself is the thumbnail.
        Does not touch recents.

        Raises:
            NotFoundError: If the document cannot be opened
        """
        logger.debug(f"open_thumbnail {document_id}")
        self._check_id(document_id)
        try:
            return self.store.open(document_id)
        except OSError as e:
            logger.error(f"Exception in open_thumbnail for {document_id}: {e}")
            raise NotFoundError(f"No such document: {document_id}") from e

    def search(
        self,
        root_id: str,
        query: str,
        limit: Optional[int] = None,
    ) -> List[DocumentMetadata]:
        """Find files under a root whose display name contains the query.

        Raises:
            InvalidArgumentError: If the query is empty
            NotFoundError: If the root is unknown
        """
        logger.debug(f"search {root_id}, {query!r}")
        if query is None or not query.strip():
            raise InvalidArgumentError("Search query must not be empty")
        self._check_root(root_id)
        return self.searcher.search(root_id, query, limit=limit)

    def list_recents(self, root_id: str) -> List[DocumentMetadata]:
        """List recently opened documents, most recent first.

        Documents that no longer exist in the store are skipped.

        Raises:
            NotFoundError: If the root is unknown
        """
        logger.debug(f"list_recents {root_id}")
        self._check_root(root_id)

        results = []
        for document_id in self.recents.list():
            if not self.tree.exists(document_id):
                logger.debug(f"Skipping stale recent {document_id}")
                continue
            results.append(self.tree.describe(document_id))
        return results

    def close(self) -> None:
        """Close the underlying asset store.

        Streams already handed out keep their own file handles.
        """
        logger.debug("close")
        self.store.close()

    def __enter__(self) -> "DocumentsBridge":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _check_id(self, document_id: str) -> None:
        if document_id is None or (not document_id and document_id != self.root_id):
            raise InvalidArgumentError("Document id must not be empty")

    def _check_root(self, root_id: str) -> None:
        if root_id != self.root_id:
            raise NotFoundError(f"Unknown root: {root_id}")

    def __repr__(self) -> str:
        return f"DocumentsBridge(root_id='{self.root_id}', store={self.store!r})"
