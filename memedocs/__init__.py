"""
memedocs - browse bundled image assets as a read-only document tree.

Main API:
    from memedocs import DocumentsBridge
    from memedocs.stores import DirectoryAssetStore, JsonPreferenceStore

    # Serve a folder of images; recents persist in prefs.json
    bridge = DocumentsBridge(
        DirectoryAssetStore("assets"),
        JsonPreferenceStore("prefs.json"),
        root_id="Memes",
    )

    # Browse
    children = bridge.list_children("Memes")

    # Search file names (case-insensitive substring)
    results = bridge.search("Memes", "cat")

    # Stream content; the document is added to recents
    with bridge.open_content("Memes/Cats/Grumpy Cat.jpg") as handle:
        data = handle.read()

    recents = bridge.list_recents("Memes")
"""

from .vfs import DocumentsBridge

__version__ = "0.1.0"
__all__ = ["DocumentsBridge"]
