"""Card data helpers.

Card data is a spreadsheet (CSV) whose header row holds field keys, e.g.
``title``, ``art (img,path)``, ``rules[]``. Each data row becomes one card
source. Repeated ``name[]`` columns collect into one list, in column order.
"""
from __future__ import annotations

import csv
import io
import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from cardcreatr.core.options.fields import ARRAY_RE

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")

DIRNAME_KEY = "_dirname"


def auto_parse(cell: str) -> Any:
    """Convert numeric-looking cells to ``int``/``float``; anything else stays text."""
    text = cell.strip()
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return cell


def parse_csv(text: str) -> List[List[Any]]:
    """Parse CSV text into rows of auto-parsed cells."""
    reader = csv.reader(io.StringIO(text))
    return [[auto_parse(cell) for cell in row] for row in reader if row]


def csv_to_objects(rows: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
    """Turn a header row plus data rows into one mapping per data row."""
    if not rows:
        return []
    header = [str(h) for h in rows[0]]
    objects: List[Dict[str, Any]] = []
    for row in rows[1:]:
        obj: Dict[str, Any] = {}
        for index, key in enumerate(header):
            value = row[index] if index < len(row) else ""
            if ARRAY_RE.search(key):
                obj.setdefault(key, []).append(value)
            else:
                obj[key] = value
        objects.append(obj)
    return objects


def read_card_objects(data: bytes) -> Dict[Any, Dict[str, Any]]:
    """Parse CSV bytes into card mappings keyed by ``id``.

    Rows without an ``id`` column get a random one.
    """
    objects: Dict[Any, Dict[str, Any]] = {}
    for obj in csv_to_objects(parse_csv(data.decode("utf-8"))):
        if "id" not in obj:
            obj["id"] = str(uuid.uuid4())
        objects[obj["id"]] = obj
    return objects


def _entry_to_list(entry: Any) -> List[Any]:
    if not entry:
        return []
    if isinstance(entry, (list, tuple)):
        return list(entry)
    return str(entry).split("\n")


def objects_to_csv(objects: Sequence[Mapping[str, Any]]) -> List[List[Any]]:
    """Inverse of :func:`csv_to_objects`.

    Array keys repeat in the header as many times as the longest list
    needs; shorter lists are padded with empty cells. String values of
    array keys are split on newlines.
    """
    if not objects:
        return []
    keys = [k for k in objects[0] if k != DIRNAME_KEY]
    widths: Dict[str, int] = {
        key: max(len(_entry_to_list(obj.get(key))) for obj in objects)
        for key in keys
        if ARRAY_RE.search(key)
    }

    header: List[Any] = []
    for key in keys:
        header.extend([key] * widths.get(key, 1))

    rows: List[List[Any]] = [header]
    for obj in objects:
        row: List[Any] = []
        for key in keys:
            if key in widths:
                values = _entry_to_list(obj.get(key))
                row.extend(values[i] if i < len(values) else "" for i in range(widths[key]))
            else:
                row.append(obj.get(key, ""))
        rows.append(row)
    return rows


def write_csv(rows: Iterable[Sequence[Any]]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return out.getvalue()


def satisfies_query(
    row: Mapping[str, Any],
    query: Optional[Mapping[str, Any]],
    index: Optional[int] = None,
) -> bool:
    """Whether a card row is selected by ``query``.

    An empty query selects everything. ``id`` or ``title`` select matching
    rows; with neither set, ``row`` (when given) selects by position.
    """
    if not query:
        return True
    card_id = query.get("id")
    title = query.get("title")
    if card_id is None and title is None:
        wanted = query.get("row")
        return wanted is None or index is None or index == wanted
    # CLI values arrive as text while CSV cells are auto-parsed.
    return (card_id is not None and str(row.get("id")) == str(card_id)) or (
        title is not None and str(row.get("title")) == str(title)
    )


def filter_rows(
    rows: Sequence[Mapping[str, Any]], query: Optional[Mapping[str, Any]]
) -> List[Mapping[str, Any]]:
    return [row for index, row in enumerate(rows) if satisfies_query(row, query, index)]


def multiply_cards(cards: Sequence[Any], rendered: Sequence[str], quantity: int) -> List[str]:
    """Repeat each rendered card ``quantity`` times its own ``/count`` (default 1)."""
    result: List[str] = []
    for card, item in zip(cards, rendered):
        count = card.get("/count", None) or 1
        result.extend([item] * (int(quantity) * int(count)))
    return result


__all__ = [
    "auto_parse",
    "csv_to_objects",
    "filter_rows",
    "multiply_cards",
    "objects_to_csv",
    "parse_csv",
    "read_card_objects",
    "satisfies_query",
    "write_csv",
]
