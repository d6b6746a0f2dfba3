"""Card Creatr Studio bundles (``.ccsb``).

A bundle is a ZIP container with a canonical set of entries:

- ``cards.csv``: the card data
- ``config.hjson``: the config source (Hjson text)
- ``template.svg.j2``: the card template
- ``fields.json``: optional field definitions for editors
- ``fonts.json``: optional list of extra named fonts

Every other entry is an asset (images, fonts) referenced from the config
or the card data by its entry name.
"""
from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
import uuid
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from cardcreatr.core.exceptions import BundleError
from cardcreatr.core.schemas import validate_payload

logger = logging.getLogger(__name__)

DATA_PATH = "cards.csv"
CONFIG_PATH = "config.hjson"
TEMPLATE_PATH = "template.svg.j2"
FIELDS_PATH = "fields.json"
FONTS_PATH = "fonts.json"

BUNDLE_MIME_TYPE = "application/x-ccs-bundle"
BUNDLE_SUFFIX = ".ccsb"

_RESERVED = frozenset({DATA_PATH, CONFIG_PATH, TEMPLATE_PATH, FIELDS_PATH, FONTS_PATH})

mimetypes.add_type(BUNDLE_MIME_TYPE, BUNDLE_SUFFIX)


class CcsbReader:
    """Reads and edits one bundle file.

    Entries are held in memory after :meth:`load`; edits only reach the
    disk through :meth:`save`.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._entries: Optional[Dict[str, bytes]] = None

    @classmethod
    def new(cls, path: Union[str, Path]) -> "CcsbReader":
        """An empty, loaded bundle that will be written to ``path``."""
        bundle = cls(path)
        bundle._entries = {}
        return bundle

    @property
    def loaded(self) -> bool:
        return self._entries is not None

    def load(self) -> "CcsbReader":
        """Read the container into memory.

        Raises:
            BundleError: If the file is missing or not a ZIP container.
        """
        logger.debug("Loading bundle %s", self.path)
        try:
            raw = self.path.read_bytes()
            with zipfile.ZipFile(BytesIO(raw)) as archive:
                self._entries = {
                    info.filename: archive.read(info)
                    for info in archive.infolist()
                    if not info.is_dir()
                }
        except (OSError, zipfile.BadZipFile) as exc:
            raise BundleError(
                f"Cannot open bundle {self.path}: {exc}", context={"path": str(self.path)}
            ) from exc
        return self

    async def load_async(self) -> "CcsbReader":
        return await asyncio.to_thread(self.load)

    def _require_entries(self) -> Dict[str, bytes]:
        if self._entries is None:
            raise BundleError(
                "You must call load() before reading from a bundle",
                context={"path": str(self.path)},
            )
        return self._entries

    def read_file(self, name: str) -> bytes:
        """Bytes of entry ``name``.

        Raises:
            BundleError: If the bundle is not loaded or has no such entry.
        """
        if not name:
            raise BundleError("Source file is missing", context={"path": str(self.path)})
        entries = self._require_entries()
        logger.debug("Reading %s from bundle %s", name, self.path)
        try:
            return entries[name]
        except KeyError:
            raise BundleError(
                f"Cannot find file in *.ccsb bundle: {name}",
                context={"path": str(self.path), "entry": name},
            ) from None

    async def read_file_async(self, name: str) -> bytes:
        return self.read_file(name)

    def contains_file(self, name: str) -> bool:
        return name in self._require_entries()

    def list_assets(self, predicate: Optional[Callable[[str], bool]] = None) -> List[str]:
        """Names of asset entries (canonical entries and ``__MACOSX/`` excluded)."""
        return [
            name
            for name in self._require_entries()
            if name not in _RESERVED
            and not name.startswith("__MACOSX/")
            and (predicate is None or predicate(name))
        ]

    def write_file(self, name: str, content: Union[bytes, str]) -> None:
        """Add or replace an entry in memory."""
        if not name:
            return
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._require_entries()[name] = bytes(content)

    def create_file(self, mime_type: str, folder: str, content: Union[bytes, str]) -> str:
        """Store ``content`` under a fresh random name in ``folder``; return the entry name."""
        extension = mimetypes.guess_extension(mime_type) or ""
        name = f"{uuid.uuid4()}{extension}"
        path = f"{folder.rstrip('/')}/{name}" if folder else name
        self.write_file(path, content)
        return path

    def remove_file(self, name: str) -> None:
        if not name:
            return
        self._require_entries().pop(name, None)

    def save(self) -> Path:
        """Write all entries to :attr:`path`."""
        entries = self._require_entries()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(self.path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, data in entries.items():
                archive.writestr(name, data)
        logger.debug("Saved bundle %s (%d entries)", self.path, len(entries))
        return self.path

    def read_json(self, name: str, default: Any = None) -> Any:
        if not self.contains_file(name):
            return default
        return json.loads(self.read_file(name).decode("utf-8"))

    def read_fields(self) -> List[Dict[str, Any]]:
        """Field definitions from ``fields.json`` (empty when absent)."""
        return list(self.read_json(FIELDS_PATH, default=[]))

    def font_source(self) -> Dict[str, Any]:
        """Source mapping extra named fonts from ``fonts.json``.

        Each font info ``{"name": "title", "filename": "fonts/a.ttf"}``
        becomes ``{"fonts": {"title (font)": "fonts/a.ttf"}}``. Infos
        without a filename are skipped.

        Raises:
            SchemaValidationError: If ``fonts.json`` is malformed.
        """
        infos = self.read_json(FONTS_PATH, default=[])
        validate_payload(infos, "fonts")
        fonts = {
            f"{info['name']} (font)": info["filename"] for info in infos if info.get("filename")
        }
        return {"fonts": fonts} if fonts else {}


def is_bundle_path(path: Union[str, Path]) -> bool:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type == BUNDLE_MIME_TYPE


__all__ = [
    "BUNDLE_MIME_TYPE",
    "CONFIG_PATH",
    "CcsbReader",
    "DATA_PATH",
    "FIELDS_PATH",
    "FONTS_PATH",
    "TEMPLATE_PATH",
    "is_bundle_path",
]
