"""Core typing contracts for layernet."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

Array = np.ndarray


class FunctionType(str, Enum):
    """Activation kind assigned to a layer."""

    SIGMOID = "sigmoid"
    RELU = "relu"
    TANH = "tanh"
    LEAKY_RELU = "leaky_relu"
    LINEAR = "linear"
    SOFTMAX = "softmax"

    @classmethod
    def parse(cls, value: "FunctionType | str") -> "FunctionType":
        """Resolve ``value`` by member, name or value, ignoring case and separators."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if key == member.value.replace("_", ""):
                return member
        available = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown activation {value!r}. Available activations: {available}")


class SoftmaxDerivative(str, Enum):
    """How the SoftMax derivative is exposed to backpropagation."""

    DIAGONAL = "diagonal"
    JACOBIAN = "jacobian"


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`layernet.training.trainer.Trainer.run`."""

    epochs: int
    steps: int
    final_loss: float
    metrics_path: str = ""
    manifest_path: str = ""
    summary_path: str = ""
    checkpoint_path: str = ""
