"""Read-only asset stores.

An asset store is a flat namespace of slash-delimited names backed by
bytes. It offers exactly two operations:

    - list(path): names directly under ``path``
    - open(path): binary stream for the asset at ``path``

Missing paths raise FileNotFoundError; listing a file raises
NotADirectoryError and opening a directory raises IsADirectoryError.
"""

import logging
import os
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Dict, List, Union

logger = logging.getLogger(__name__)


class AssetStore(ABC):
    """Base class for read-only byte stores."""

    @abstractmethod
    def list(self, path: str) -> List[str]:
        """List the names directly under a directory.

        Args:
            path: Slash-delimited directory path ("" for the store root)

        Returns:
            Child names in store order
        """
        pass

    @abstractmethod
    def open(self, path: str) -> BinaryIO:
        """Open an asset for reading.

        Args:
            path: Slash-delimited asset path

        Returns:
            Binary stream; the caller closes it
        """
        pass

    def close(self) -> None:
        """Release any resources held by the store."""
        pass

    @staticmethod
    def _parts(path: str) -> List[str]:
        parts = [part for part in path.split("/") if part]
        for part in parts:
            if part in (".", ".."):
                raise FileNotFoundError(f"Invalid asset path: {path}")
        return parts


class DirectoryAssetStore(AssetStore):
    """Assets kept as plain files under a directory on disk."""

    def __init__(self, root: Union[str, Path]):
        """Initialize the store.

        Args:
            root: Directory holding the assets
        """
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root.joinpath(*self._parts(path))

    def list(self, path: str) -> List[str]:
        target = self._resolve(path)
        if not target.exists():
            raise FileNotFoundError(f"No such asset directory: {path}")
        if not target.is_dir():
            raise NotADirectoryError(f"Not an asset directory: {path}")
        # os.listdir order is arbitrary; keep listings stable
        return sorted(os.listdir(target))

    def open(self, path: str) -> BinaryIO:
        target = self._resolve(path)
        if target.is_dir():
            raise IsADirectoryError(f"Asset is a directory: {path}")
        return open(target, "rb")

    def __repr__(self) -> str:
        return f"DirectoryAssetStore(root='{self.root}')"


class ZipAssetStore(AssetStore):
    """Assets bundled in a zip archive.

    Directories are implied by member names; explicit directory entries
    are accepted but not required.
    """

    def __init__(self, archive: Union[str, Path]):
        """Open the archive and index its members.

        Args:
            archive: Path to the .zip file
        """
        self.archive = Path(archive)
        self._zip = zipfile.ZipFile(self.archive)
        self._files: Dict[str, str] = {}
        self._children: Dict[str, List[str]] = {"": []}

        for member in self._zip.namelist():
            parts = [part for part in member.split("/") if part]
            if not parts:
                continue
            if not member.endswith("/"):
                self._files["/".join(parts)] = member
            for depth in range(len(parts)):
                parent = "/".join(parts[:depth])
                children = self._children.setdefault(parent, [])
                if parts[depth] not in children:
                    children.append(parts[depth])
                if depth < len(parts) - 1 or member.endswith("/"):
                    self._children.setdefault("/".join(parts[:depth + 1]), [])

        logger.debug(f"Indexed {len(self._files)} assets in {self.archive}")

    def list(self, path: str) -> List[str]:
        key = "/".join(self._parts(path))
        if key in self._children:
            return list(self._children[key])
        if key in self._files:
            raise NotADirectoryError(f"Not an asset directory: {path}")
        raise FileNotFoundError(f"No such asset directory: {path}")

    def open(self, path: str) -> BinaryIO:
        key = "/".join(self._parts(path))
        if key in self._files:
            return self._zip.open(self._files[key])
        if key in self._children:
            raise IsADirectoryError(f"Asset is a directory: {path}")
        raise FileNotFoundError(f"No such asset: {path}")

    def close(self) -> None:
        self._zip.close()

    def __repr__(self) -> str:
        return f"ZipAssetStore(archive='{self.archive}')"


def open_asset_store(location: Union[str, Path]) -> AssetStore:
    """Open a directory or zip archive as an asset store.

    Raises:
        FileNotFoundError: If the location does not exist
    """
    location = Path(location).expanduser()
    if not location.exists():
        raise FileNotFoundError(f"Asset location not found: {location}")
    if location.is_file() and zipfile.is_zipfile(location):
        return ZipAssetStore(location)
    if location.is_dir():
        return DirectoryAssetStore(location)
    raise FileNotFoundError(f"Not a directory or zip archive: {location}")
