"""Recently opened documents.

The ledger keeps a bounded, most-recent-first list of document ids in a
preference store under a single key, comma-joined. It is re-read from
the store on every access and never cached, so it survives restarts.
"""

import logging
import threading
import time
from typing import List, Optional

from memedocs.stores.prefs import PreferenceStore
from memedocs.vfs.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


RECENTS_KEY = "recents"
MAX_RECENTS = 64
DELIMITER = ","
LAST_ACCESS_PREFIX = "last-access:"


class RecentsLedger:
    """Bounded most-recent-first list of opened documents.

    ``record_access`` may be called from transfer threads while queries
    run elsewhere. The read-modify-write of the stored list is the one
    critical section and is serialized by a single lock.
    """

    def __init__(self, prefs: PreferenceStore, capacity: int = MAX_RECENTS):
        """Initialize the ledger.

        Args:
            prefs: Preference store holding the list
            capacity: Maximum number of ids kept
        """
        if capacity < 1:
            raise ValueError(f"Recents capacity must be at least 1, got {capacity}")
        self.prefs = prefs
        self.capacity = capacity
        self._lock = threading.Lock()

    def list(self) -> List[str]:
        """Get recent document ids, most recent first."""
        return self._read()

    def record_access(self, document_id: str, when: Optional[int] = None) -> bool:
        """Move a document to the front of the list.

        An existing occurrence is removed first, so re-opening a document
        promotes it without growing the list. Entries past the capacity
        are dropped from the tail along with their access times. The access
        time of the opened document is stored alongside.

        Args:
            document_id: Document that was opened
            when: Access time in epoch milliseconds (default: now)

        Returns:
            True if the store accepted every write

        Raises:
            InvalidArgumentError: If the id is empty or contains the delimiter
        """
        if not document_id:
            raise InvalidArgumentError("Cannot record an empty document id")
        if DELIMITER in document_id:
            raise InvalidArgumentError(
                f"Document id contains '{DELIMITER}': {document_id!r}"
            )

        if when is None:
            when = int(time.time() * 1000)

        with self._lock:
            recents = [doc_id for doc_id in self._read() if doc_id != document_id]
            recents.insert(0, document_id)
            evicted = recents[self.capacity:]
            del recents[self.capacity:]

            stored = self.prefs.put_string(RECENTS_KEY, DELIMITER.join(recents))
            stamped = self.prefs.put_int(LAST_ACCESS_PREFIX + document_id, when)
            for doc_id in evicted:
                stamped = self.prefs.remove(LAST_ACCESS_PREFIX + doc_id) and stamped

        if not (stored and stamped):
            logger.warning(f"Failed to persist recents after opening {document_id}")
            return False

        logger.debug(f"Recorded access to {document_id} ({len(recents)} recents)")
        return True

    def last_access(self, document_id: str) -> Optional[int]:
        """Get the last recorded access time in epoch milliseconds."""
        return self.prefs.get_int(LAST_ACCESS_PREFIX + document_id)

    def clear(self) -> bool:
        """Forget all recent documents and their access times."""
        with self._lock:
            ok = True
            for key in self.prefs.keys():
                if key.startswith(LAST_ACCESS_PREFIX):
                    ok = self.prefs.remove(key) and ok
            ok = self.prefs.remove(RECENTS_KEY) and ok
        return ok

    def _read(self) -> List[str]:
        raw = self.prefs.get_string(RECENTS_KEY, "")
        if not raw:
            return []
        return [doc_id for doc_id in raw.split(DELIMITER) if doc_id]
