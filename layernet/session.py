"""Explicit session state shared by console command handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .core.errors import InvalidExample, SessionError
from .core.network import LayeredNetwork
from .data.examples import TrainingExample, TrainingSet
from .data.persistence import load_examples, save_examples


@dataclass
class Session:
    """The active network and training set of one console session."""

    network: Optional[LayeredNetwork] = None
    examples: TrainingSet = field(default_factory=TrainingSet)
    seed: Optional[int] = None

    def require_network(self) -> LayeredNetwork:
        if self.network is None:
            raise SessionError("No network has been created yet")
        return self.network

    def require_examples(self) -> TrainingSet:
        if len(self.examples) == 0:
            raise SessionError("No training data has been loaded or added yet")
        return self.examples

    def create_network(self, layers: Sequence[int], randomize: bool = True) -> LayeredNetwork:
        self.network = LayeredNetwork(layers, randomize=randomize, seed=self.seed)
        return self.network

    def add_example(self, inputs: Sequence[float], target: Sequence[float]) -> TrainingExample:
        network = self.require_network()
        example = TrainingExample(inputs, target)
        if example.input.size != network.input_count:
            raise InvalidExample(
                f"Expected {network.input_count} inputs, got {example.input.size}"
            )
        if example.target.size != network.output_count:
            raise InvalidExample(
                f"Expected {network.output_count} targets, got {example.target.size}"
            )
        self.examples.append(example)
        return example

    def load(self, path: str | Path) -> TrainingSet:
        self.examples = load_examples(path)
        return self.examples

    def save(self, path: str | Path) -> Path:
        return save_examples(self.examples, path)

    def train_pass(self, learning_rate: float) -> float:
        """Run one SGD step per example and return the summed residual diagnostic."""

        network = self.require_network()
        examples = self.require_examples()
        examples.check_compatible(network.input_count, network.output_count)
        return float(sum(network.train_one(example, learning_rate) for example in examples))


__all__ = ["Session"]
