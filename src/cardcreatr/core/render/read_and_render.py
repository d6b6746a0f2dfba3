"""Read a config (or bundle), resolve everything, render cards and pages.

Input is the path to a config file or a ``.ccsb`` bundle plus an optional
fallback mapping (the CLI passes its arguments this way). Output is one
SVG document.

Loading runs either blocking (:meth:`ReadAndRender.load_sync`) or
concurrently (:meth:`ReadAndRender.load`). The concurrent path starts
compiling the template and parsing the card data as soon as ``/template``
and ``/data`` resolve, while the rest of the config is still loading.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import hjson
import yaml

from cardcreatr.core import bundle as ccsb
from cardcreatr.core.cards import csv_to_objects, filter_rows, multiply_cards, parse_csv
from cardcreatr.core.exceptions import CardCreatrError, ConfigFormatError, FieldNotFound
from cardcreatr.core.layout.page import PageRenderer
from cardcreatr.core.layout.svg import document, length
from cardcreatr.core.options import ABSENT, Asset, DirectoryContext, Options, ResolutionContext
from cardcreatr.core.options.context import ContextLike
from cardcreatr.core.options.resolver import gather_fail_fast
from cardcreatr.core.render.renderer import RENDER_MODE_AUTO, CardRenderer, font_face_defs
from cardcreatr.core.schemas import validate_payload

logger = logging.getLogger(__name__)

CONFIG_SUFFIXES = (".json", ".yaml", ".yml", ".hjson")
# JSON is a subset of Hjson
HJSON_SUFFIXES = (".json", ".hjson")

FIRST_CARD = -1
ALL_PAGES = -2


def parse_config(content: bytes, name: str = "<config>") -> Dict[str, Any]:
    """Parse config text into a mapping.

    ``name`` picks the syntax: ``.hjson`` and ``.json`` names (bundles
    store ``config.hjson``) are read as Hjson, everything else as YAML.

    Raises:
        ConfigFormatError: If the text does not parse or is not a mapping.
    """
    try:
        text = content.decode("utf-8")
        if not text.strip():
            data = None
        elif Path(name).suffix.lower() in HJSON_SUFFIXES:
            data = hjson.loads(text, object_pairs_hook=dict)
        else:
            data = yaml.safe_load(text)
    except (hjson.HjsonDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigFormatError(f"Cannot parse config {name}: {exc}", context={"path": name}) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFormatError(
            f"Config {name} must be a mapping, got {type(data).__name__}", context={"path": name}
        )
    return data


def data_context(asset: Asset) -> ResolutionContext:
    """Context for paths named inside a card-data file: its own directory."""
    if asset.context is None or isinstance(asset.context, DirectoryContext):
        return DirectoryContext(Path(asset.path).parent)
    return asset.context


class ReadAndRender:
    """Renders the cards described by one config file or bundle."""

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        fallback: Optional[Mapping[str, Any]] = None,
        fallback_context: ContextLike = None,
    ) -> None:
        self.options = Options()
        if fallback:
            self.options.add_fallback(fallback, fallback_context)
        self.options.add_default_fallback()

        self.config_path: Optional[Path] = None
        self.bundle: Optional[ccsb.CcsbReader] = None
        self.renderer: Optional[CardRenderer] = None
        self.back_renderer: Optional[CardRenderer] = None
        self.cards: List[Options] = []

        if path:
            path = Path(path)
            if ccsb.is_bundle_path(path):
                self.bundle = ccsb.CcsbReader(path)
            elif path.suffix.lower() in CONFIG_SUFFIXES:
                self.config_path = path
            else:
                raise ConfigFormatError(
                    f"Unknown config file type: {path.suffix or path.name}",
                    context={"path": str(path)},
                )

    # Loading

    def _add_config_sources(self, content: bytes) -> None:
        if self.config_path is not None:
            config = parse_config(content, str(self.config_path))
            self.options.add_primary(config, self.config_path.parent)
        elif self.bundle is not None:
            config = parse_config(content, ccsb.CONFIG_PATH)
            reader = self.bundle.read_file
            self.options.add_primary(
                {"template (path)": ccsb.TEMPLATE_PATH, "data (path)": ccsb.DATA_PATH}, reader
            )
            self.options.add_primary(self.bundle.font_source(), reader)
            self.options.add_primary(config, reader)

    def _read_config(self) -> bytes:
        if self.config_path is not None:
            logger.debug("Reading config %s", self.config_path)
            try:
                return self.config_path.read_bytes()
            except OSError as exc:
                raise ConfigFormatError(
                    f"Cannot read config {self.config_path}: {exc.strerror or exc}",
                    context={"path": str(self.config_path)},
                ) from exc
        if self.bundle is not None:
            self.bundle.load()
            return self.bundle.read_file(ccsb.CONFIG_PATH)
        return b""

    async def _read_config_async(self) -> bytes:
        if self.bundle is not None:
            await self.bundle.load_async()
            return await self.bundle.read_file_async(ccsb.CONFIG_PATH)
        return await asyncio.to_thread(self._read_config)

    def load_config_sync(self) -> Options:
        """Resolve the config tree only (no template, no cards)."""
        self._add_config_sources(self._read_config())
        return self.options.load_sync()

    async def load_config(self) -> Options:
        self._add_config_sources(await self._read_config_async())
        return await self.options.load()

    def load_sync(self) -> "ReadAndRender":
        self.load_config_sync()

        self.renderer = self._build_renderer(self.options.get("/template"))
        self.back_renderer = self._build_back_renderer()

        data = self.options.get("/data")
        rows = self._select_rows(data, self.options.get("/query", None))
        self.cards = [Options().add_primary(row, data_context(data)).load_sync() for row in rows]
        logger.debug("Loaded %d card(s)", len(self.cards))
        return self

    async def load(self) -> "ReadAndRender":
        async def build_renderer() -> None:
            template = await self._wait_for("/template")
            self.renderer = self._build_renderer(template)

        async def load_cards() -> None:
            query_loaded = self.options.wait_loaded("/query")
            data = await self._wait_for("/data")
            query = await query_loaded
            rows = self._select_rows(data, None if query is ABSENT else query)
            context = data_context(data)
            self.cards = await gather_fail_fast(
                Options().add_primary(row, context).load() for row in rows
            )

        await gather_fail_fast([self.load_config(), build_renderer(), load_cards()])
        self.back_renderer = self._build_back_renderer()
        logger.debug("Loaded %d card(s)", len(self.cards))
        return self

    async def _wait_for(self, address: str) -> Any:
        value = await self.options.wait_loaded(address)
        if value is ABSENT:
            raise FieldNotFound(address)
        return value

    def _build_renderer(self, template: Any, address: str = "/template") -> CardRenderer:
        return CardRenderer().build(_asset_text(template, address))

    def _build_back_renderer(self) -> Optional[CardRenderer]:
        back = self.options.get("/backTemplate", None)
        if back is None:
            return None
        return self._build_renderer(back, "/backTemplate")

    @staticmethod
    def _select_rows(data: Any, query: Optional[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        rows = csv_to_objects(parse_csv(_asset_text(data, "/data")))
        return filter_rows(rows, query)

    # Rendering

    def render_cards(self, back: bool = False) -> List[str]:
        """Every loaded card rendered once, in data order."""
        renderer = self.back_renderer if back else self.renderer
        if renderer is None:
            if back:
                raise FieldNotFound("/backTemplate")
            raise CardCreatrError("load() or load_sync() must be called before rendering")
        config = self.options.to_dict()
        return [renderer.render(card.to_dict(), config) for card in self.cards]

    def run(self, page: int = FIRST_CARD, quantity: Optional[int] = None, backs: bool = False) -> str:
        """Render to one SVG document.

        Args:
            page: ``-1`` for the first card alone, ``-2`` for every page
                stacked into one document, ``N >= 1`` for page ``N``.
            quantity: Copies of each card; defaults to ``/query/multiples``.
            backs: With ``page == -2``, follow each page with its mirrored
                back page rendered from ``/backTemplate``.
        """
        if quantity is None:
            quantity = self.options.get("/query/multiples", 1) or 1
        items = multiply_cards(self.cards, self.render_cards(), quantity)
        if not items:
            raise CardCreatrError("No cards are available matching your query.")

        config = self.options.to_dict()
        defs: List[str] = []
        if config.get("fontRenderMode", RENDER_MODE_AUTO) == RENDER_MODE_AUTO:
            defs.append(font_face_defs(config.get("fonts")))

        if page == FIRST_CARD:
            card_dims = self.options.get("/dimensions/card")
            return document(
                items[0],
                length(card_dims["width"], card_dims.get("unit")),
                length(card_dims["height"], card_dims.get("unit")),
                defs=defs,
            )

        renderer = self._page_renderer()
        page_dims = self.options.get("/dimensions/page")
        unit = page_dims.get("unit")
        if page == ALL_PAGES:
            back_items = None
            if backs:
                back_items = multiply_cards(self.cards, self.render_cards(back=True), quantity)
            content, num_pages = renderer.render_concatenated(items, back_items)
            return document(
                content,
                length(page_dims["width"], unit),
                length(page_dims["height"] * num_pages, unit),
                view_box=f"0 0 1 {num_pages}",
                defs=defs,
            )

        pages = renderer.render(items)
        if page < 1 or page > len(pages):
            raise CardCreatrError(
                f"Page {page} is out of range (1-{len(pages)})",
                context={"page": page, "pages": len(pages)},
            )
        return document(
            pages[page - 1],
            length(page_dims["width"], unit),
            length(page_dims["height"], unit),
            defs=defs,
        )

    def _page_renderer(self) -> PageRenderer:
        section = {
            "viewport": self.options.get("/viewports/page"),
            "layoutStrategy": self.options.get("/layoutStrategy"),
        }
        validate_payload(section, "page")
        return PageRenderer.from_viewport(section["viewport"], section["layoutStrategy"])


def _asset_text(value: Any, address: str) -> str:
    if not isinstance(value, Asset):
        raise ConfigFormatError(
            f"Field {address} must name a file, got {value!r}", context={"path": address}
        )
    return value.text()


__all__ = ["ALL_PAGES", "FIRST_CARD", "ReadAndRender", "data_context", "parse_config"]
