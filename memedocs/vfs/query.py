"""Hierarchical queries over the inferred document tree."""

import logging
import mimetypes
from typing import List, Optional

from memedocs.stores.assets import AssetStore
from memedocs.vfs import paths
from memedocs.vfs.base import DocumentMetadata, MIME_TYPE_DIR, MIME_TYPE_IMAGE, NodeKind
from memedocs.vfs.errors import InvalidArgumentError, IOFailureError, NotFoundError
from memedocs.vfs.recents import RecentsLedger

logger = logging.getLogger(__name__)


class TreeQuery:
    """Answers "children of X" and "metadata for X".

    Files are described from their id alone; only directory lookups
    consult the asset store.
    """

    def __init__(
        self,
        store: AssetStore,
        root_id: str,
        root_title: Optional[str] = None,
        ledger: Optional[RecentsLedger] = None,
    ):
        """Initialize the query engine.

        Args:
            store: Asset store to list
            root_id: Document id of the tree root
            root_title: Display name of the root (default: root id)
            ledger: Recents ledger supplying last access times
        """
        self.store = store
        self.root_id = root_id
        self.root_title = root_title or root_id or "/"
        self.ledger = ledger

    def get_metadata(self, document_id: str) -> DocumentMetadata:
        """Describe a single document.

        Args:
            document_id: Document to describe

        Returns:
            DocumentMetadata for the document

        Raises:
            NotFoundError: If the id is a directory the store cannot list
        """
        if paths.is_directory(document_id) or document_id == self.root_id:
            self.list_child_ids(document_id)
        return self.describe(document_id)

    def list_children(self, parent_id: str) -> List[DocumentMetadata]:
        """Describe every child of a directory, in store order.

        Raises:
            NotFoundError: If the store cannot list the directory
        """
        return [self.describe(doc_id) for doc_id in self.list_child_ids(parent_id)]

    def list_child_ids(self, parent_id: str) -> List[str]:
        """List the ids of a directory's children, in store order.

        Names that cannot form a valid id are skipped with a warning.

        Raises:
            NotFoundError: If the directory does not exist
            IOFailureError: If the store failed for another reason
        """
        try:
            names = self.store.list(parent_id)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(f"No such directory: {parent_id}") from e
        except OSError as e:
            logger.error(f"Failed to list {parent_id}: {e}", exc_info=True)
            raise IOFailureError(f"Failed to list {parent_id}: {e}") from e

        child_ids = []
        for name in names:
            try:
                child_ids.append(paths.child_id(parent_id, name))
            except InvalidArgumentError as e:
                logger.warning(f"Skipping asset under {parent_id}: {e}")
        return child_ids

    def exists(self, document_id: str) -> bool:
        """Check whether a document still resolves in the store.

        Directories must be listable; files must appear in their
        parent's listing.
        """
        if not document_id and document_id != self.root_id:
            return False

        try:
            if document_id == self.root_id or paths.is_directory(document_id):
                self.store.list(document_id)
                return True
            return paths.last_segment(document_id) in self.store.list(
                paths.parent_id(document_id)
            )
        except OSError as e:
            logger.debug(f"{document_id} does not resolve: {e}")
            return False

    def describe(self, document_id: str) -> DocumentMetadata:
        """Build metadata from the id alone, without touching the store."""
        last_modified = self.ledger.last_access(document_id) if self.ledger else None

        if document_id == self.root_id:
            return DocumentMetadata(
                document_id=document_id,
                display_name=self.root_title,
                kind=NodeKind.DIRECTORY,
                mime_type=MIME_TYPE_DIR,
                last_modified=last_modified,
                prefers_grid=True,
            )

        kind = paths.kind_of(document_id)
        if kind is NodeKind.DIRECTORY:
            return DocumentMetadata(
                document_id=document_id,
                display_name=paths.display_name(document_id),
                kind=kind,
                mime_type=MIME_TYPE_DIR,
                last_modified=last_modified,
                prefers_grid=True,
            )

        return DocumentMetadata(
            document_id=document_id,
            display_name=paths.display_name(document_id),
            kind=kind,
            mime_type=guess_mime_type(document_id),
            last_modified=last_modified,
            thumbnail_supported=True,
        )


def guess_mime_type(document_id: str) -> str:
    """Guess a file's MIME type from its extension, defaulting to image/*."""
    mime_type, _ = mimetypes.guess_type(paths.last_segment(document_id))
    return mime_type or MIME_TYPE_IMAGE
