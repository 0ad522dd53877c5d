"""JSON persistence for training sets.

Files hold a list of ``{"Input": [...], "Target": [...]}`` objects.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from ..core.errors import InvalidExample
from .examples import TrainingExample, TrainingSet


def load_examples(path: str | Path) -> TrainingSet:
    """Read and validate every example stored at ``path``."""

    path = Path(path)
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise InvalidExample(f"{path.name} must contain a list of examples")
    return TrainingSet.from_records(records)


def save_examples(examples: Iterable[TrainingExample], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [example.to_record() for example in examples]
    path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
    return path


__all__ = ["load_examples", "save_examples"]
