"""Shared CLI utilities."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from cardcreatr.core.render import ReadAndRender

logger = logging.getLogger(__name__)


def build_fallback(args: argparse.Namespace) -> Dict[str, Any]:
    """Fallback source built from command-line arguments.

    Config files take precedence over these values; relative paths
    resolve against the working directory.
    """
    source: Dict[str, Any] = {}
    template = getattr(args, "template", None)
    data = getattr(args, "data", None)
    if template:
        source["template (path)"] = template
    if data:
        source["data (path)"] = data

    query = {
        key: getattr(args, key, None)
        for key in ("row", "id", "title")
        if getattr(args, key, None) is not None
    }
    if query:
        source["query"] = query
    return source


def load_pipeline(args: argparse.Namespace) -> ReadAndRender:
    """Construct and load a :class:`ReadAndRender` from parsed arguments."""
    pipeline = ReadAndRender(getattr(args, "config", None), build_fallback(args))
    if getattr(args, "sync", False):
        logger.debug("Loading synchronously")
        return pipeline.load_sync()
    return asyncio.run(pipeline.load())


def write_output(text: str, output: Optional[str]) -> None:
    """Write ``text`` to ``output`` (a path) or stdout."""
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.debug("Wrote %d chars to %s", len(text), path)
    else:
        print(text, end="" if text.endswith("\n") else "\n")


__all__ = ["build_fallback", "load_pipeline", "write_output"]
