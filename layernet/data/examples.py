"""Training examples and the ordered collection handed to the trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Mapping, Sequence

import numpy as np

from ..core.errors import InvalidExample
from ..core.types import Array


def _as_vector(values: Sequence[float] | Array, name: str) -> Array:
    try:
        arr = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidExample(f"{name} must be a sequence of numbers") from exc
    if arr.ndim != 1:
        raise InvalidExample(f"{name} must be a flat vector, got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidExample(f"{name} array cannot be empty")
    if not np.all(np.isfinite(arr)):
        raise InvalidExample(f"{name} contains NaN or infinite values")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class TrainingExample:
    """Immutable ``(input, target)`` pair validated at construction."""

    input: Array
    target: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", _as_vector(self.input, "Input"))
        object.__setattr__(self, "target", _as_vector(self.target, "Target"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrainingExample):
            return NotImplemented
        return np.array_equal(self.input, other.input) and np.array_equal(self.target, other.target)

    __hash__ = None  # type: ignore[assignment]

    def to_record(self) -> Mapping[str, List[float]]:
        return {"Input": self.input.tolist(), "Target": self.target.tolist()}

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> "TrainingExample":
        if not isinstance(record, Mapping):
            raise InvalidExample(f"Example record must be an object, got {type(record).__name__}")
        missing = {"Input", "Target"} - set(record)
        if missing:
            raise InvalidExample(f"Example record is missing fields: {', '.join(sorted(missing))}")
        return cls(record["Input"], record["Target"])  # type: ignore[arg-type]


class TrainingSet:
    """Ordered, append-only collection of :class:`TrainingExample`."""

    def __init__(self, examples: Iterable[TrainingExample] = ()) -> None:
        self._examples: List[TrainingExample] = []
        self.extend(examples)

    def append(self, example: TrainingExample) -> None:
        if not isinstance(example, TrainingExample):
            raise TypeError(f"Expected TrainingExample, got {type(example).__name__}")
        self._examples.append(example)

    def add(self, inputs: Sequence[float], target: Sequence[float]) -> TrainingExample:
        example = TrainingExample(inputs, target)
        self.append(example)
        return example

    def extend(self, examples: Iterable[TrainingExample]) -> None:
        for example in examples:
            self.append(example)

    def clear(self) -> None:
        self._examples.clear()

    def __iter__(self) -> Iterator[TrainingExample]:
        return iter(self._examples)

    def __len__(self) -> int:
        return len(self._examples)

    def __getitem__(self, index: int) -> TrainingExample:
        return self._examples[index]

    def check_compatible(self, input_count: int, output_count: int) -> None:
        """Raise :class:`InvalidExample` if any example's widths do not match."""

        for idx, example in enumerate(self._examples):
            if example.input.size != input_count:
                raise InvalidExample(
                    f"Example {idx} has {example.input.size} inputs, expected {input_count}"
                )
            if example.target.size != output_count:
                raise InvalidExample(
                    f"Example {idx} has {example.target.size} targets, expected {output_count}"
                )

    def to_records(self) -> List[Mapping[str, List[float]]]:
        return [example.to_record() for example in self._examples]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, object]]) -> "TrainingSet":
        return cls(TrainingExample.from_record(record) for record in records)


__all__ = ["TrainingExample", "TrainingSet"]
