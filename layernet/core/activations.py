"""Activation utilities for layernet.

Every function here is pure: it maps a vector of pre-activation values to a
vector of activations and, when asked, the derivative material consumed by
:meth:`layernet.core.network.LayeredNetwork.train_one`.

SoftMax is the only kind whose true derivative is not elementwise.  By default
(:attr:`SoftmaxDerivative.DIAGONAL`) only the diagonal of its Jacobian,
``a_i * (1 - a_i)``, is returned.  That is an approximation: it ignores the
cross terms ``-a_i * a_j`` and is only meaningful because the backward pass
composes layer derivatives elementwise.  :attr:`SoftmaxDerivative.JACOBIAN`
returns the exact ``(n, n)`` matrix instead.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .types import Array, FunctionType, SoftmaxDerivative

LEAKY_RELU_ALPHA = 0.01


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``."""

    # exp overflows past ~709; clipping keeps the result finite and saturated
    return 1.0 / (1.0 + np.exp(-np.clip(x, -709.0, 709.0)))


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def leaky_relu(x: Array, alpha: float | None = None) -> Array:
    alpha = LEAKY_RELU_ALPHA if alpha is None else alpha
    return np.where(x >= 0.0, x, alpha * x)


def linear(x: Array) -> Array:
    return np.array(x, dtype=np.float64, copy=True)


def softmax(x: Array) -> Array:
    """Numerically stable softmax over a single vector."""

    shifted = x - np.max(x)
    e = np.exp(shifted)
    return e / np.sum(e)


def softmax_jacobian(a: Array) -> Array:
    """Return ``J[i, j] = a_i * (delta_ij - a_j)`` for softmax output ``a``."""

    return np.diag(a) - np.outer(a, a)


# Derivatives are expressed in terms of the input ``x`` and the activation ``a``
# so that sigmoid and tanh reuse ``a`` instead of re-evaluating exponentials.
_Derivative = Callable[[Array, Array, float], Array]

_DERIVATIVES: Dict[FunctionType, _Derivative] = {
    FunctionType.SIGMOID: lambda x, a, alpha: a * (1.0 - a),
    FunctionType.RELU: lambda x, a, alpha: np.where(x >= 0.0, 1.0, 0.0),
    FunctionType.TANH: lambda x, a, alpha: 1.0 - a * a,
    FunctionType.LEAKY_RELU: lambda x, a, alpha: np.where(x >= 0.0, 1.0, alpha),
    FunctionType.LINEAR: lambda x, a, alpha: np.ones_like(x),
    FunctionType.SOFTMAX: lambda x, a, alpha: a * (1.0 - a),
}


def activate(
    kind: FunctionType | str,
    values: Array,
    gradients: bool = False,
    *,
    alpha: float | None = None,
    softmax_derivative: SoftmaxDerivative | str = SoftmaxDerivative.DIAGONAL,
) -> Tuple[Array, Optional[Array]]:
    """Apply activation ``kind`` to ``values``.

    Returns ``(activations, derivatives)``.  ``derivatives`` is ``None`` unless
    ``gradients`` is true; it has the shape of ``values`` except for SoftMax in
    Jacobian mode, where it is an ``(n, n)`` matrix.

    NaN and infinite inputs are not guarded and propagate per IEEE-754.
    """

    kind = FunctionType.parse(kind)
    x = np.asarray(values, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Activation input must be a vector, got shape {x.shape}")
    if x.size == 0:
        raise ValueError("Activation input must not be empty")
    alpha = LEAKY_RELU_ALPHA if alpha is None else float(alpha)

    if kind is FunctionType.SIGMOID:
        a = sigmoid(x)
    elif kind is FunctionType.RELU:
        a = relu(x)
    elif kind is FunctionType.TANH:
        a = tanh(x)
    elif kind is FunctionType.LEAKY_RELU:
        a = leaky_relu(x, alpha)
    elif kind is FunctionType.LINEAR:
        a = linear(x)
    else:
        a = softmax(x)

    if not gradients:
        return a, None
    if kind is FunctionType.SOFTMAX and SoftmaxDerivative(softmax_derivative) is SoftmaxDerivative.JACOBIAN:
        return a, softmax_jacobian(a)
    return a, _DERIVATIVES[kind](x, a, alpha)


__all__ = [
    "LEAKY_RELU_ALPHA",
    "activate",
    "leaky_relu",
    "linear",
    "relu",
    "sigmoid",
    "softmax",
    "softmax_jacobian",
    "tanh",
]
