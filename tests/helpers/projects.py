"""On-disk projects for end-to-end tests."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml

from cardcreatr.core import bundle as ccsb

TEMPLATE = '<rect width="{{ viewport.width }}" height="{{ viewport.height }}"/><text>{{ title }}</text>\n'
BACK_TEMPLATE = "<text>back of {{ title }}</text>\n"
CARDS = "id,title,count (uint)\nc1,Alpha,1\nc2,Beta,2\nc3,Gamma,1\n"


def write_project(
    root: Path,
    config: Optional[Dict] = None,
    *,
    cards: str = CARDS,
    template: str = TEMPLATE,
) -> Path:
    """Write config.yaml, template and cards under ``root``; return the config path."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "template.svg.j2").write_text(template, encoding="utf-8")
    (root / "back.svg.j2").write_text(BACK_TEMPLATE, encoding="utf-8")
    (root / "cards.csv").write_text(cards, encoding="utf-8")
    data = {"template (path)": "template.svg.j2", "data (path)": "cards.csv"}
    data.update(config or {})
    path = root / "config.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def write_bundle(
    path: Path,
    config: str = "layoutStrategy: tight\n",
    *,
    cards: str = CARDS,
    template: str = TEMPLATE,
    extra: Optional[Dict[str, bytes]] = None,
) -> Path:
    bundle = ccsb.CcsbReader.new(path)
    bundle.write_file(ccsb.CONFIG_PATH, config)
    bundle.write_file(ccsb.TEMPLATE_PATH, template)
    bundle.write_file(ccsb.DATA_PATH, cards)
    for name, content in (extra or {}).items():
        bundle.write_file(name, content)
    bundle.save()
    return path
