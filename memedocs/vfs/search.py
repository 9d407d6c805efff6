"""Name search over the inferred document tree."""

import logging
from collections import deque
from typing import Deque, List, Optional, Set

from memedocs.vfs import paths
from memedocs.vfs.base import DocumentMetadata
from memedocs.vfs.errors import InvalidArgumentError, NotFoundError
from memedocs.vfs.query import TreeQuery

logger = logging.getLogger(__name__)


class SearchEngine:
    """Breadth-first name search.

    A file matches if its lowercased display name contains the lowercased
    query. Results come back in the order they are found: level by level,
    and within a level in the order the store lists directories. Stores
    that list in arbitrary order therefore give arbitrary order between
    branches of equal depth. There is no ranking.
    """

    def __init__(self, tree: TreeQuery):
        """Initialize the search engine.

        Args:
            tree: Query engine used to list directories and build metadata
        """
        self.tree = tree

    def search(
        self,
        root_id: str,
        query: str,
        limit: Optional[int] = None,
    ) -> List[DocumentMetadata]:
        """Find files below a node whose display name contains ``query``.

        Args:
            root_id: Node to start from
            query: Case-insensitive substring to look for
            limit: Stop after this many matches (None for all)

        Returns:
            Matching files, first found first

        Raises:
            InvalidArgumentError: If the query is empty or limit is not positive
            NotFoundError: If the starting directory cannot be listed
        """
        if query is None or not query.strip():
            raise InvalidArgumentError("Search query must not be empty")
        if limit is not None and limit < 1:
            raise InvalidArgumentError(f"Search limit must be positive, got {limit}")

        needle = query.lower()
        results: List[DocumentMetadata] = []
        pending: Deque[str] = deque([root_id])
        seen: Set[str] = {root_id}

        while pending:
            document_id = pending.popleft()

            if document_id == root_id or paths.is_directory(document_id):
                try:
                    child_ids = self.tree.list_child_ids(document_id)
                except NotFoundError as e:
                    if document_id == root_id:
                        raise
                    logger.warning(f"Search skipping {document_id}: {e}")
                    continue

                for child_id in child_ids:
                    if child_id not in seen:
                        seen.add(child_id)
                        pending.append(child_id)
                continue

            if needle in paths.display_name(document_id).lower():
                results.append(self.tree.describe(document_id))
                if limit is not None and len(results) >= limit:
                    break

        logger.debug(f"Search for {query!r} under {root_id} found {len(results)} documents")
        return results
