"""Virtual document tree over a read-only asset store.

The asset store is a flat namespace of slash-delimited names with no
directory markers. The bridge infers a tree from those names and serves
it to document browsers.

Architecture:

    ```
    Memes/                      # Root (root id "Memes")
    ├── Cats/                   # Directory: no dot in the last segment
    │   ├── Grumpy Cat.jpg      # File: display name "Grumpy Cat"
    │   └── Keyboard Cat.gif
    └── Dogs/
        └── Good Boy.jpg
    ```

Components:

    - paths: pure id rules (is_directory, display_name, child_id)
    - TreeQuery: metadata and children of a node
    - SearchEngine: breadth-first substring search over file names
    - RecentsLedger: bounded most-recent-first list in a preference store
    - ContentStreamer: pipe + background thread per opened document
    - DocumentsBridge: the operations exposed to protocol adapters

Usage Example:

    ```python
    from memedocs.stores import DirectoryAssetStore, JsonPreferenceStore
    from memedocs.vfs import DocumentsBridge

    bridge = DocumentsBridge(
        DirectoryAssetStore("assets"),
        JsonPreferenceStore("prefs.json"),
    )

    for doc in bridge.list_children("Memes"):
        print(doc.display_name, doc.kind.value)

    for doc in bridge.search("Memes", "cat"):
        print(doc.document_id)

    with bridge.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
        data = handle.read()
    ```
"""

from memedocs.vfs.base import (
    DocumentMetadata,
    RootDescriptor,
    NodeKind,
    MIME_TYPE_DIR,
    MIME_TYPE_IMAGE,
)
from memedocs.vfs.errors import (
    DocumentError,
    NotFoundError,
    InvalidArgumentError,
    IOFailureError,
    TransferInterruptedError,
)
from memedocs.vfs.query import TreeQuery
from memedocs.vfs.search import SearchEngine
from memedocs.vfs.recents import RecentsLedger, MAX_RECENTS
from memedocs.vfs.streamer import ContentStreamer, ReadableHandle, TransferTask
from memedocs.vfs.provider import DocumentsBridge

__all__ = [
    # Main entry point
    "DocumentsBridge",
    # Core types
    "DocumentMetadata",
    "RootDescriptor",
    "NodeKind",
    "MIME_TYPE_DIR",
    "MIME_TYPE_IMAGE",
    # Components
    "TreeQuery",
    "SearchEngine",
    "RecentsLedger",
    "MAX_RECENTS",
    "ContentStreamer",
    "ReadableHandle",
    "TransferTask",
    # Errors
    "DocumentError",
    "NotFoundError",
    "InvalidArgumentError",
    "IOFailureError",
    "TransferInterruptedError",
]
