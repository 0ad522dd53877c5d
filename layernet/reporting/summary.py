"""Condense a run's epoch records into ``summary.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoidal area under ``points`` with unit spacing between epochs."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) * 0.5))


def summarize_epochs(records: Sequence[Mapping[str, float]]) -> Mapping[str, object]:
    """Reduce epoch records (``epoch``, ``loss``, ``error``) to headline numbers.

    ``loss`` is the mean squared residual, so its best epoch is the minimum.
    ``error`` is the signed residual sum and can cancel out, so it is reported
    by its final value and its largest magnitude.
    """

    if not records:
        return {"epochs": 0, "loss": None, "error": None}

    epochs = [int(r["epoch"]) for r in records]
    loss = np.asarray([r["loss"] for r in records], dtype=np.float64)
    error = np.asarray([r["error"] for r in records], dtype=np.float64)
    best = int(np.argmin(loss))
    return {
        "epochs": len(records),
        "loss": {
            "first": float(loss[0]),
            "final": float(loss[-1]),
            "best": float(loss[best]),
            "best_epoch": epochs[best],
            "auc": compute_auc(loss.tolist()),
        },
        "error": {
            "final": float(error[-1]),
            "max_abs": float(np.max(np.abs(error))),
        },
    }


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Summarise the JSONL written by :class:`JsonlSink` into ``out_summary_json``."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records = [
        json.loads(line)
        for line in metrics_path.read_text().splitlines()
        if line.strip()
    ]
    out_path.write_text(json.dumps(summarize_epochs(records), sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "summarize_epochs", "write_summary"]
