"""layernet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import (
    CommandError,
    InvalidExample,
    InvalidLayerIndex,
    InvalidTopology,
    LayerNetError,
    SessionError,
)
from .core.network import LayeredNetwork
from .core.types import FunctionType, SoftmaxDerivative
from .data import TrainingExample, TrainingSet, load_examples, save_examples
from .session import Session
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "CommandError",
    "FunctionType",
    "InvalidExample",
    "InvalidLayerIndex",
    "InvalidTopology",
    "LayerNetError",
    "LayeredNetwork",
    "Session",
    "SessionError",
    "SoftmaxDerivative",
    "Trainer",
    "TrainingExample",
    "TrainingSet",
    "activations",
    "load_examples",
    "load_preset",
    "presets",
    "run_pipeline",
    "save_examples",
    "types",
]
