"""Per-epoch metric sinks for training runs."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping

# Columns every epoch record carries, in file order.
EPOCH_FIELDS = ("epoch", "loss", "error")


def _epoch_row(epoch: int, metrics: Mapping[str, float]) -> dict:
    missing = [name for name in EPOCH_FIELDS[1:] if name not in metrics]
    if missing:
        raise KeyError(f"Epoch metrics missing: {', '.join(missing)}")
    row: dict = {"epoch": int(epoch)}
    row.update({name: float(metrics[name]) for name in EPOCH_FIELDS[1:]})
    return row


class JsonlSink:
    """Write one JSON object per epoch: ``epoch``, ``loss``, ``error`` and ``seed``."""

    def __init__(self, path: str | Path, *, seed: int | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = _epoch_row(epoch, metrics)
        record["seed"] = self.seed
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write ``epoch,loss,error`` rows under a header written up front."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow(EPOCH_FIELDS)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row = _epoch_row(epoch, metrics)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            csv.DictWriter(handle, fieldnames=EPOCH_FIELDS).writerow(row)

    __call__ = on_epoch


__all__ = ["CsvSink", "EPOCH_FIELDS", "JsonlSink"]
