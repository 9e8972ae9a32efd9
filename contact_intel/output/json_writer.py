"""JSON serialization of pipeline results."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
import json
from pathlib import Path
from typing import Any

from ..core.types import PipelineResult


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and datetimes into plain JSON values.

    Enums serialize as their value, datetimes as ISO 8601 strings and
    tuples as lists.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def write_results(result: PipelineResult, output_path: Path) -> None:
    """Write the full pipeline result to ``output_path`` as indented JSON."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(to_jsonable(result), f, indent=2, ensure_ascii=False)
