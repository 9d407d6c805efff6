"""Document id handling for the inferred tree.

The asset store has no directory markers, so the tree shape comes from
the names alone: a node whose last segment contains a dot is a file,
anything else is a directory. All kind decisions go through
``is_directory`` so the rule can be replaced in one place.
"""

from typing import List

from memedocs.vfs.base import NodeKind
from memedocs.vfs.errors import InvalidArgumentError


SEPARATOR = "/"
EXTENSION_MARK = "."


def split_id(document_id: str) -> List[str]:
    """Split a document id into its non-empty segments.

    Args:
        document_id: Slash-delimited id, e.g. "Memes/Cats/Grumpy Cat.jpg"

    Returns:
        List of segments, e.g. ["Memes", "Cats", "Grumpy Cat.jpg"]
    """
    return [part for part in document_id.split(SEPARATOR) if part]


def last_segment(document_id: str) -> str:
    """Get the final segment of a document id ("" for the store root)."""
    parts = split_id(document_id)
    return parts[-1] if parts else ""


def is_directory(document_id: str) -> bool:
    """Check whether a document id names a directory.

    True iff the final segment has no extension mark. The empty id is
    the store root and therefore a directory.
    """
    return EXTENSION_MARK not in last_segment(document_id)


def kind_of(document_id: str) -> NodeKind:
    """Classify a document id."""
    return NodeKind.DIRECTORY if is_directory(document_id) else NodeKind.FILE


def display_name(document_id: str) -> str:
    """Derive the user-visible name of a document.

    Directories keep their final segment. Files lose the text from the
    last dot onwards, so "Cats/Grumpy Cat.jpg" becomes "Grumpy Cat" and
    "a/archive.tar.gz" becomes "archive.tar". A name whose only dot is
    the leading one (".hidden") is kept whole.

    Raises:
        InvalidArgumentError: If the id has no segments
    """
    name = last_segment(document_id)
    if not name:
        raise InvalidArgumentError(f"Empty document id: {document_id!r}")

    if is_directory(document_id):
        return name

    stem = name.rsplit(EXTENSION_MARK, 1)[0]
    return stem or name


def child_id(parent_id: str, segment: str) -> str:
    """Join a parent id and a child name.

    Inverse of ``split_id``: the last segment of the result is exactly
    ``segment``.

    Raises:
        InvalidArgumentError: If the segment is empty or contains a separator
    """
    if not segment:
        raise InvalidArgumentError(f"Empty child name under {parent_id!r}")
    if SEPARATOR in segment:
        raise InvalidArgumentError(f"Child name contains '{SEPARATOR}': {segment!r}")

    parent = parent_id.rstrip(SEPARATOR)
    if not parent:
        return segment
    return f"{parent}{SEPARATOR}{segment}"


def parent_id(document_id: str) -> str:
    """Get the id of the containing directory ("" at the top level)."""
    parts = split_id(document_id)
    return SEPARATOR.join(parts[:-1])
