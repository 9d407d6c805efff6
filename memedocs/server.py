"""
Web server for memedocs.

Exposes the document bridge over HTTP so any client can browse, search
and stream the assets.
"""

import logging
from typing import Iterator, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from .vfs import DocumentMetadata, DocumentsBridge, InvalidArgumentError, NotFoundError, RootDescriptor
from .vfs.query import guess_mime_type
from .vfs.streamer import ReadableHandle

logger = logging.getLogger(__name__)


# Pydantic models for API
class RootResponse(BaseModel):
    root_id: str
    title: str
    document_id: str
    supports_recents: bool
    supports_search: bool
    local_only: bool
    mime_types: List[str]


class DocumentResponse(BaseModel):
    document_id: str
    display_name: str
    kind: str
    mime_type: str
    size: Optional[int] = None
    last_modified: Optional[int] = None
    thumbnail_supported: bool
    prefers_grid: bool


# Global bridge instance
_bridge: Optional[DocumentsBridge] = None


def get_bridge() -> DocumentsBridge:
    """Get the bridge serving requests."""
    if _bridge is None:
        raise HTTPException(status_code=500, detail="Document bridge not initialized")
    return _bridge


def set_bridge(bridge: DocumentsBridge):
    """Set the bridge serving requests."""
    global _bridge
    _bridge = bridge


def create_app(bridge: DocumentsBridge) -> FastAPI:
    """Create FastAPI application serving the given bridge."""
    set_bridge(bridge)
    return app


# Create FastAPI app
app = FastAPI(
    title="memedocs",
    description="Read-only document tree over bundled image assets",
    version="0.1.0"
)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, InvalidArgumentError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=404, detail=str(e))


def _document_response(doc: DocumentMetadata) -> DocumentResponse:
    return DocumentResponse(**doc.to_dict())


def _root_response(root: RootDescriptor) -> RootResponse:
    return RootResponse(**root.to_dict())


def _stream(handle: ReadableHandle) -> Iterator[bytes]:
    try:
        yield from handle.iter_chunks()
    finally:
        handle.close()


@app.get("/api/roots", response_model=List[RootResponse])
def list_roots():
    """List browsable roots."""
    return [_root_response(root) for root in get_bridge().list_roots()]


@app.get("/api/document", response_model=DocumentResponse)
def get_document(id: str = Query(..., description="Document id")):
    """Get metadata for one document."""
    try:
        return _document_response(get_bridge().get_document(id))
    except (NotFoundError, InvalidArgumentError) as e:
        raise _http_error(e)


@app.get("/api/children", response_model=List[DocumentResponse])
def list_children(parent: str = Query(..., description="Parent document id")):
    """List the children of a directory."""
    try:
        return [_document_response(doc) for doc in get_bridge().list_children(parent)]
    except (NotFoundError, InvalidArgumentError) as e:
        raise _http_error(e)


@app.get("/api/content")
def open_content(id: str = Query(..., description="Document id")):
    """Stream a document's bytes. Adds the document to recents."""
    bridge = get_bridge()
    try:
        handle = bridge.open_content(id)
    except (NotFoundError, InvalidArgumentError) as e:
        raise _http_error(e)

    return StreamingResponse(_stream(handle), media_type=guess_mime_type(id))


@app.get("/api/thumbnail")
def open_thumbnail(id: str = Query(..., description="Document id")):
    """Get a document's thumbnail."""
    bridge = get_bridge()
    try:
        stream = bridge.open_thumbnail(id)
    except (NotFoundError, InvalidArgumentError) as e:
        raise _http_error(e)

    def chunks() -> Iterator[bytes]:
        with stream:
            while True:
                chunk = stream.read(8192)
                if not chunk:
                    return
                yield chunk

    return StreamingResponse(chunks(), media_type=guess_mime_type(id))


@app.get("/api/search", response_model=List[DocumentResponse])
def search(
    root: str = Query(..., description="Root id"),
    query: str = Query(..., description="Text to look for in document names"),
    limit: Optional[int] = Query(None, ge=1, le=10000),
):
    """Search documents by name."""
    try:
        results = get_bridge().search(root, query, limit=limit)
    except (NotFoundError, InvalidArgumentError) as e:
        raise _http_error(e)
    return [_document_response(doc) for doc in results]


@app.get("/api/recents", response_model=List[DocumentResponse])
def list_recents(root: str = Query(..., description="Root id")):
    """List recently opened documents, most recent first."""
    try:
        results = get_bridge().list_recents(root)
    except (NotFoundError, InvalidArgumentError) as e:
        raise _http_error(e)
    return [_document_response(doc) for doc in results]
