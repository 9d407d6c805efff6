"""Error types raised by the document bridge."""


class DocumentError(Exception):
    """Base class for document bridge errors."""
    pass


class NotFoundError(DocumentError, LookupError):
    """Document id does not resolve in the asset store."""
    pass


class InvalidArgumentError(DocumentError, ValueError):
    """Malformed document id or query supplied by the caller."""
    pass


class IOFailureError(NotFoundError):
    """Transient failure reading the asset store.

    Reported upstream the same way as a missing document.
    """
    pass


class TransferInterruptedError(DocumentError):
    """Content transfer failed after the handle was returned.

    Never raised from ``open_content``; recorded on the transfer task.
    """
    pass
