"""Backpropagation must match the per-neuron update rules exactly."""

import numpy as np
import pytest

from layernet.core.activations import activate
from layernet.core.network import LayeredNetwork
from layernet.core.types import FunctionType, SoftmaxDerivative
from layernet.data.examples import TrainingExample


def _reference_step(net, x, t, lr):
    """Loop-based SGD step computed from copies of the network's parameters."""

    weights = [W.copy() for W in net.weights]
    biases = [b.copy() for b in net.biases]
    acts = [np.asarray(x, dtype=float)]
    derivs = [None]
    for i, W in enumerate(weights):
        a, d = activate(net.functions[i + 1], biases[i + 1] + W @ acts[i], True)
        acts.append(a)
        derivs.append(d)

    errors = [None] * len(acts)
    errors[-1] = acts[-1] - np.asarray(t, dtype=float)
    total = float(np.sum(errors[-1]))
    new_w = [W.copy() for W in weights]
    new_b = [b.copy() for b in biases]
    for i in range(len(acts) - 2, -1, -1):
        errors[i] = np.zeros(acts[i].size)
        for k in range(acts[i].size):
            for j in range(acts[i + 1].size):
                errors[i][k] += weights[i][j, k] * derivs[i + 1][j] * errors[i + 1][j]
        for j in range(acts[i + 1].size):
            for k in range(acts[i].size):
                new_w[i][j, k] -= lr * errors[i + 1][j] * derivs[i + 1][j] * acts[i][k]
            new_b[i + 1][j] -= lr * errors[i + 1][j] * derivs[i + 1][j]
    return total, new_w, new_b


@pytest.mark.parametrize(
    "functions",
    [
        ["sigmoid", "sigmoid", "sigmoid", "sigmoid"],
        ["linear", "relu", "tanh", "linear"],
        ["sigmoid", "leaky_relu", "sigmoid", "softmax"],
    ],
)
def test_train_one_matches_reference_updates(functions):
    net = LayeredNetwork([3, 4, 3, 2], randomize=True, seed=11)
    for idx, kind in enumerate(functions):
        net.set_activation(idx, kind)
    x, t, lr = [0.2, -0.7, 0.5], [0.9, 0.1], 0.3

    expected_total, expected_w, expected_b = _reference_step(net, x, t, lr)
    total = net.train_one(TrainingExample(x, t), lr)

    assert total == pytest.approx(expected_total)
    for W, ref in zip(net.weights, expected_w):
        assert np.allclose(W, ref)
    for b, ref in zip(net.biases, expected_b):
        assert np.allclose(b, ref)


def test_total_error_is_signed_residual_sum():
    net = LayeredNetwork([2, 3, 2], randomize=False)
    total = net.train_one(TrainingExample([1.0, 1.0], [1.0, 0.25]), 0.0)
    # zero network outputs 0.5 everywhere: (0.5 - 1.0) + (0.5 - 0.25)
    assert total == pytest.approx(-0.25)


def test_input_biases_never_change():
    net = LayeredNetwork([2, 3, 1], randomize=True, seed=2)
    for _ in range(5):
        net.train_one(TrainingExample([0.4, 0.6], [1.0]), 0.5)
    assert np.all(net.biases[0] == 0.0)


def _loss(net, x, t):
    out = net.predict(x)
    return 0.5 * float(np.sum((out - t) ** 2))


@pytest.mark.parametrize(
    "output_kind, mode",
    [
        (FunctionType.LINEAR, SoftmaxDerivative.DIAGONAL),
        (FunctionType.SIGMOID, SoftmaxDerivative.DIAGONAL),
        (FunctionType.SOFTMAX, SoftmaxDerivative.JACOBIAN),
    ],
)
def test_updates_follow_the_squared_error_gradient(output_kind, mode):
    net = LayeredNetwork([3, 4, 3], randomize=True, seed=4, softmax_derivative=mode)
    net.set_activation(1, FunctionType.TANH)
    net.set_activation(2, output_kind)
    x = np.array([0.3, -0.2, 0.9])
    t = np.array([0.2, 0.7, 0.1])

    eps = 1e-6
    numeric = []
    for W in net.weights:
        grad = np.zeros_like(W)
        for idx in np.ndindex(W.shape):
            original = W[idx]
            W[idx] = original + eps
            plus = _loss(net, x, t)
            W[idx] = original - eps
            minus = _loss(net, x, t)
            W[idx] = original
            grad[idx] = (plus - minus) / (2 * eps)
        numeric.append(grad)

    before = [W.copy() for W in net.weights]
    lr = 1e-3
    net.train_one(TrainingExample(x, t), lr)
    for W_before, W_after, grad in zip(before, net.weights, numeric):
        assert np.allclose((W_before - W_after) / lr, grad, rtol=1e-4, atol=1e-7)


def test_diagonal_softmax_differs_from_jacobian():
    example = TrainingExample([0.3, -0.2], [1.0, 0.0])
    diag = LayeredNetwork([2, 2], seed=9)
    jac = LayeredNetwork([2, 2], seed=9, softmax_derivative="jacobian")
    for net in (diag, jac):
        net.set_activation(1, "softmax")
        net.train_one(example, 0.5)
    assert not np.allclose(diag.weights[0], jac.weights[0])


@pytest.mark.parametrize("output_kind", ["linear", "sigmoid"])
def test_repeated_steps_reduce_squared_error_monotonically(output_kind):
    net = LayeredNetwork([2, 3, 1], randomize=True, seed=0)
    net.set_activation(2, output_kind)
    example = TrainingExample([0.5, -0.2], [0.7])
    lr = 0.05 if output_kind == "linear" else 0.5

    errors = []
    for _ in range(600):
        net.train_one(example, lr)
        errors.append(float((net.output[0] - 0.7) ** 2))

    assert all(later <= earlier + 1e-15 for earlier, later in zip(errors, errors[1:]))
    assert errors[-1] < errors[0] * 1e-3
