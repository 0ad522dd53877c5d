"""Fully connected feed-forward network trained by per-example backpropagation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, MutableSequence, Optional, Sequence

import numpy as np

from .activations import activate
from .errors import InvalidLayerIndex, InvalidTopology
from .types import Array, FunctionType, SoftmaxDerivative

INIT_RANGE = (-0.5, 0.5)


def _validate_topology(layer_sizes: Sequence[int]) -> List[int]:
    sizes = list(layer_sizes)
    if len(sizes) < 2:
        raise InvalidTopology(f"A network needs at least 2 layers, got {len(sizes)}")
    for idx, size in enumerate(sizes):
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size < 1:
            raise InvalidTopology(f"Layer {idx} must hold at least one neuron, got {size!r}")
    return [int(size) for size in sizes]


@dataclass(eq=False)
class LayeredNetwork:
    """Fully connected network with a configurable activation per layer.

    ``weights[i]`` has shape ``(layer_sizes[i + 1], layer_sizes[i])`` so that
    ``weights[i][j, k]`` connects source neuron ``k`` in layer ``i`` to target
    neuron ``j`` in layer ``i + 1``.  ``biases[i]`` holds one value per neuron
    of layer ``i``; the input layer's biases stay zero and are never read.

    With ``randomize`` every weight and every hidden bias is drawn uniformly
    from ``[-0.5, 0.5)``.  The output layer's biases stay at zero unless
    ``randomize_output_bias`` is set.

    The scratch buffers (activations, weighted sums, derivatives) are
    overwritten by every :meth:`forward` call.  Instances are not safe for
    concurrent use.
    """

    layer_sizes: Sequence[int]
    randomize: bool = True
    seed: Optional[int] = None
    randomize_output_bias: bool = False
    softmax_derivative: SoftmaxDerivative = SoftmaxDerivative.DIAGONAL
    weights: MutableSequence[Array] = field(init=False, repr=False)
    biases: MutableSequence[Array] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.layer_sizes = tuple(_validate_topology(self.layer_sizes))
        self.softmax_derivative = SoftmaxDerivative(self.softmax_derivative)
        self._functions: List[FunctionType] = [FunctionType.SIGMOID] * self.layer_count
        self.reset(self.seed)

    # ------------------------------------------------------------------
    # Construction

    def reset(self, seed: Optional[int] = None) -> None:
        """(Re)allocate parameters and scratch buffers for the topology."""

        rng = np.random.default_rng(seed)
        low, high = INIT_RANGE
        dims = list(self.layer_sizes)
        weights: list[Array] = []
        for in_dim, out_dim in zip(dims[:-1], dims[1:]):
            if self.randomize:
                W = rng.uniform(low, high, size=(out_dim, in_dim))
            else:
                W = np.zeros((out_dim, in_dim), dtype=np.float64)
            weights.append(W)

        biases: list[Array] = []
        last = len(dims) - 1
        for idx, size in enumerate(dims):
            hidden = 0 < idx < last
            output = idx == last and self.randomize_output_bias
            if self.randomize and (hidden or output):
                biases.append(rng.uniform(low, high, size=size))
            else:
                biases.append(np.zeros(size, dtype=np.float64))

        self.weights = weights
        self.biases = biases
        self._activations: List[Array] = [np.zeros(size, dtype=np.float64) for size in dims]
        self._sums: List[Array] = [np.zeros(size, dtype=np.float64) for size in dims]
        self._derivatives: List[Optional[Array]] = [None] * len(dims)

    @property
    def layer_count(self) -> int:
        return len(self.layer_sizes)

    @property
    def input_count(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_count(self) -> int:
        return self.layer_sizes[-1]

    @property
    def functions(self) -> tuple[FunctionType, ...]:
        return tuple(self._functions)

    @property
    def output(self) -> Array:
        """Copy of the output layer's activations from the last forward pass."""

        return self._activations[-1].copy()

    def parameter_count(self) -> int:
        return int(sum(w.size for w in self.weights) + sum(b.size for b in self.biases[1:]))

    def set_activation(self, index: int, kind: FunctionType | str) -> None:
        """Assign activation ``kind`` to layer ``index``.

        Negative indices are rejected rather than counted from the end.
        """

        if (
            isinstance(index, bool)
            or not isinstance(index, (int, np.integer))
            or not 0 <= index < self.layer_count
        ):
            raise InvalidLayerIndex(
                f"Invalid layer index {index}; expected 0..{self.layer_count - 1}"
            )
        self._functions[index] = FunctionType.parse(kind)

    # ------------------------------------------------------------------
    # Forward inference

    def forward(self, inputs: Sequence[float] | Array, gradients: bool = False) -> Array:
        """Propagate ``inputs`` through the network.

        Returns the internal output buffer; it is replaced by the next call to
        :meth:`forward` or :meth:`train_one`.  ``inputs`` must hold exactly
        :attr:`input_count` values; any other shape raises ``ValueError``
        instead of being broadcast.
        """

        values = np.asarray(inputs, dtype=np.float64)
        if values.shape != (self.input_count,):
            raise ValueError(
                f"Expected {self.input_count} input values, got shape {values.shape}"
            )
        self._activations[0][:] = values
        for src in range(self.layer_count - 1):
            dst = src + 1
            z = self.biases[dst] + self.weights[src] @ self._activations[src]
            self._sums[dst] = z
            a, d = activate(
                self._functions[dst],
                z,
                gradients,
                softmax_derivative=self.softmax_derivative,
            )
            self._activations[dst] = a
            self._derivatives[dst] = d
        return self._activations[-1]

    def predict(self, inputs: Sequence[float] | Array) -> Array:
        """Return a copy of the network's output for ``inputs``."""

        return self.forward(inputs, gradients=False).copy()

    # ------------------------------------------------------------------
    # Backpropagation

    def train_one(self, example, learning_rate: float) -> float:
        """Run a single SGD step on ``example`` and return the residual sum.

        ``example`` is any object with ``input`` and ``target`` vectors (see
        :class:`layernet.data.examples.TrainingExample`).  The returned value
        is the signed sum of ``output - target`` over the output neurons,
        a diagnostic rather than a loss.  A target whose length differs from
        :attr:`output_count` is not checked and yields undefined results.
        """

        self.forward(example.input, gradients=True)
        target = np.asarray(example.target, dtype=np.float64)
        error = self._activations[-1] - target
        total_error = float(np.sum(error))

        upstream = error
        for src in reversed(range(self.layer_count - 1)):
            dst = src + 1
            local = self._local_gradient(dst, upstream)
            # uses the weights before this layer's update
            upstream = self.weights[src].T @ local
            self.weights[src] -= learning_rate * np.outer(local, self._activations[src])
            self.biases[dst] -= learning_rate * local
        return total_error

    backpropagate = train_one

    def _local_gradient(self, layer: int, error: Array) -> Array:
        derivative = self._derivatives[layer]
        if derivative is None:  # pragma: no cover - forward always requests gradients
            raise RuntimeError(f"No derivatives recorded for layer {layer}")
        if derivative.ndim == 2:
            return derivative.T @ error
        return derivative * error

    # ------------------------------------------------------------------
    # Diagnostics and persistence

    def describe(self) -> str:
        """Human-readable dump of every weight and bias."""

        lines = [f"{self.layer_count} Layers: => [{'] ['.join(str(s) for s in self.layer_sizes)}]"]
        for i, W in enumerate(self.weights):
            for j in range(W.shape[0]):
                for k in range(W.shape[1]):
                    lines.append(f"From layer {i} to {j} from {k}: Weight = {W[j, k]}")
        for i, b in enumerate(self.biases):
            for j in range(b.shape[0]):
                lines.append(f"layer {i} neuron {j}: Bias  = {b[j]}")
        return "\n".join(lines) + "\n"

    __str__ = describe

    def state_dict(self) -> Mapping[str, Array]:
        state = {f"W{idx}": W.copy() for idx, W in enumerate(self.weights)}
        state.update({f"b{idx}": b.copy() for idx, b in enumerate(self.biases)})
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        for idx, W in enumerate(self.weights):
            self.weights[idx] = self._checked(state, f"W{idx}", W.shape)
        for idx, b in enumerate(self.biases):
            self.biases[idx] = self._checked(state, f"b{idx}", b.shape)

    @staticmethod
    def _checked(state: Mapping[str, Array], key: str, shape: tuple[int, ...]) -> Array:
        if key not in state:
            raise KeyError(f"Missing parameter {key} in state dict")
        value = np.array(state[key], dtype=np.float64)
        if value.shape != shape:
            raise ValueError(f"Parameter {key} has shape {value.shape}, expected {shape}")
        return value

    def save(self, path: str | Path) -> Path:
        """Write topology, activations and parameters to a compressed ``.npz``."""

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = dict(self.state_dict())
        payload["layer_sizes"] = np.asarray(self.layer_sizes, dtype=np.int64)
        payload["functions"] = np.asarray([f.value for f in self._functions])
        payload["softmax_derivative"] = np.asarray(self.softmax_derivative.value)
        with path.open("wb") as handle:
            np.savez_compressed(handle, **payload)
        return path

    @classmethod
    def load(cls, path: str | Path) -> "LayeredNetwork":
        with np.load(Path(path), allow_pickle=False) as data:
            network = cls(
                [int(s) for s in data["layer_sizes"]],
                randomize=False,
                softmax_derivative=SoftmaxDerivative(str(data["softmax_derivative"])),
            )
            for idx, name in enumerate(data["functions"]):
                network.set_activation(idx, str(name))
            network.load_state_dict({key: data[key] for key in data.files})
        return network


__all__ = ["INIT_RANGE", "LayeredNetwork"]
