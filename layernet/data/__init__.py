"""Training data collaborators for layernet."""

from .examples import TrainingExample, TrainingSet
from .persistence import load_examples, save_examples

__all__ = ["TrainingExample", "TrainingSet", "load_examples", "save_examples"]
