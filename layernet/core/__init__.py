"""Core numerical primitives for layernet."""

from . import activations, errors, network, types

__all__ = ["activations", "errors", "network", "types"]
