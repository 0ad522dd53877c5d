"""Loss registry used to monitor training runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.types import Array

LossFn = Callable[[Array, Array], float]


@dataclass(frozen=True)
class Loss:
    """Named reduction of ``predictions - targets`` to a scalar."""

    name: str
    fn: LossFn

    def __call__(self, predictions: Array, targets: Array) -> float:
        return self.fn(predictions, targets)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn) -> None:
        self._registry[name] = Loss(name, fn)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def get(self, name: str) -> Loss:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name]


REGISTRY = LossRegistry()


def _mse(pred: Array, target: Array) -> float:
    diff = np.asarray(pred) - np.asarray(target)
    return float(np.mean(np.square(diff)))


def _mae(pred: Array, target: Array) -> float:
    diff = np.asarray(pred) - np.asarray(target)
    return float(np.mean(np.abs(diff)))


def _residual_sum(pred: Array, target: Array) -> float:
    # Same signed diagnostic that LayeredNetwork.train_one returns.
    return float(np.sum(np.asarray(pred) - np.asarray(target)))


REGISTRY.register("mse", _mse)
REGISTRY.register("mae", _mae)
REGISTRY.register("residual_sum", _residual_sum)

__all__ = ["Loss", "LossRegistry", "REGISTRY"]
