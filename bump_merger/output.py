from __future__ import annotations

import json
from pathlib import Path

from .runner import RunSummary


def write_json(path: str | Path, summary: RunSummary) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(summary.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return p
