"""Core types for the document tree.

The tree is never stored. Every node is described by its document id
and everything else (kind, display name, mime type) is derived from it:

    - NodeKind: DIRECTORY or FILE, inferred from the id
    - DocumentMetadata: one row describing a node for the browser
    - RootDescriptor: one row describing a browsable root
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


MIME_TYPE_DIR = "inode/directory"
MIME_TYPE_IMAGE = "image/*"


class NodeKind(Enum):
    """Kind of document tree node."""
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class DocumentMetadata:
    """Metadata for a single document.

    Attributes:
        document_id: Slash-delimited path of the node (e.g. "Memes/Cats")
        display_name: Name shown to the user
        kind: Directory or file
        mime_type: MIME type (MIME_TYPE_DIR for directories)
        size: Size in bytes; the asset store does not expose it, so None
        last_modified: Last access through the bridge, epoch milliseconds
        thumbnail_supported: Whether the document can render a thumbnail
        prefers_grid: Whether a directory should be shown as a grid
    """
    document_id: str
    display_name: str
    kind: NodeKind
    mime_type: str
    size: Optional[int] = None
    last_modified: Optional[int] = None
    thumbnail_supported: bool = False
    prefers_grid: bool = False

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a protocol row."""
        return {
            "document_id": self.document_id,
            "display_name": self.display_name,
            "kind": self.kind.value,
            "mime_type": self.mime_type,
            "size": self.size,
            "last_modified": self.last_modified,
            "thumbnail_supported": self.thumbnail_supported,
            "prefers_grid": self.prefers_grid,
        }


@dataclass(frozen=True)
class RootDescriptor:
    """A browsable root advertised to the document browser."""
    root_id: str
    title: str
    document_id: str
    supports_recents: bool = True
    supports_search: bool = True
    local_only: bool = True
    mime_types: Tuple[str, ...] = field(default=(MIME_TYPE_IMAGE,))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a protocol row."""
        return {
            "root_id": self.root_id,
            "title": self.title,
            "document_id": self.document_id,
            "supports_recents": self.supports_recents,
            "supports_search": self.supports_search,
            "local_only": self.local_only,
            "mime_types": list(self.mime_types),
        }
