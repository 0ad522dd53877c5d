"""Training loops, losses and config-driven runs."""

from . import losses, pipelines, trainer

__all__ = ["losses", "pipelines", "trainer"]
