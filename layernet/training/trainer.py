"""Deterministic per-example SGD training loops for layernet."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Sequence

import numpy as np

from ..core.network import LayeredNetwork
from ..core.types import Array, RunResult
from ..data.examples import TrainingExample
from .losses import REGISTRY as LOSS_REGISTRY


class Trainer:
    """Drive :meth:`LayeredNetwork.train_one` over a training set.

    One step is one example; one epoch is one pass over the whole set.
    Callbacks receive ``(epoch, metrics)`` through ``on_epoch`` or, for plain
    callables, a direct call.
    """

    def __init__(
        self,
        network: LayeredNetwork,
        learning_rate: float,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.learning_rate = float(learning_rate)
        self.callbacks = list(callbacks or [])

    def run(
        self,
        examples: Sequence[TrainingExample],
        epochs: int,
        *,
        seed: int = 0,
        shuffle: bool = False,
        early_stopping_patience: int | None = None,
        checkpoint_dir: str | Path | None = None,
    ) -> RunResult:
        if epochs < 1:
            raise ValueError(f"epochs must be positive, got {epochs}")
        examples = list(examples)
        if not examples:
            raise ValueError("Cannot train on an empty training set")

        rng = np.random.default_rng(seed)
        checkpoint_dir = Path(checkpoint_dir) if checkpoint_dir is not None else None
        best_loss = float("inf")
        epochs_no_improve = 0
        total_steps = 0
        completed = 0
        current_loss = float("nan")

        for epoch in range(1, epochs + 1):
            order = rng.permutation(len(examples)) if shuffle else range(len(examples))
            metrics = self._run_epoch(examples[idx] for idx in order)
            total_steps += len(examples)
            completed = epoch
            self._emit_epoch(epoch, metrics)

            current_loss = float(metrics["loss"])
            if current_loss < best_loss - 1e-12:
                best_loss = current_loss
                epochs_no_improve = 0
                if checkpoint_dir is not None:
                    self.network.save(checkpoint_dir / "best.ckpt")
            else:
                epochs_no_improve += 1
                if early_stopping_patience and epochs_no_improve >= early_stopping_patience:
                    break

        checkpoint_path = ""
        if checkpoint_dir is not None:
            checkpoint_path = str(self.network.save(checkpoint_dir / "last.ckpt"))
        return RunResult(
            epochs=completed,
            steps=total_steps,
            final_loss=current_loss,
            checkpoint_path=checkpoint_path,
        )

    def evaluate(self, examples: Iterable[TrainingExample], loss: str = "mse") -> float:
        """Reduce forward-only predictions over ``examples`` with a registered loss."""

        loss_fn = LOSS_REGISTRY.get(loss)
        preds: list[Array] = []
        targets: list[Array] = []
        for example in examples:
            preds.append(self.network.predict(example.input))
            targets.append(example.target)
        if not preds:
            raise ValueError("Cannot evaluate on an empty training set")
        return loss_fn(np.concatenate(preds), np.concatenate(targets))

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(self, examples: Iterable[TrainingExample]) -> Mapping[str, float]:
        squared: list[float] = []
        error = 0.0
        for example in examples:
            error += self.network.train_one(example, self.learning_rate)
            # train_one leaves the pre-update prediction in the output buffer
            squared.append(LOSS_REGISTRY.get("mse")(self.network.output, example.target))
        return {"loss": float(np.mean(squared)), "error": float(error)}

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Trainer"]
