"""Error taxonomy for layernet."""

from __future__ import annotations


class LayerNetError(Exception):
    """Base class for errors raised by layernet."""


class InvalidTopology(LayerNetError, ValueError):
    """Raised when a layer-size sequence cannot describe a network."""


class InvalidLayerIndex(LayerNetError, IndexError):
    """Raised when a layer index falls outside ``[0, layer_count - 1]``."""


class InvalidExample(LayerNetError, ValueError):
    """Raised when a training example holds empty or non-finite vectors."""


class SessionError(LayerNetError, RuntimeError):
    """Raised when a command needs state the session does not hold yet."""


class CommandError(LayerNetError, ValueError):
    """Raised when console input cannot be parsed within the retry budget."""


__all__ = [
    "LayerNetError",
    "InvalidTopology",
    "InvalidLayerIndex",
    "InvalidExample",
    "SessionError",
    "CommandError",
]
