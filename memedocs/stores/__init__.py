"""External stores the document bridge reads from and persists to."""

from memedocs.stores.assets import (
    AssetStore,
    DirectoryAssetStore,
    ZipAssetStore,
    open_asset_store,
)
from memedocs.stores.prefs import (
    PreferenceStore,
    MemoryPreferenceStore,
    JsonPreferenceStore,
)

__all__ = [
    # Asset stores
    "AssetStore",
    "DirectoryAssetStore",
    "ZipAssetStore",
    "open_asset_store",
    # Preference stores
    "PreferenceStore",
    "MemoryPreferenceStore",
    "JsonPreferenceStore",
]
