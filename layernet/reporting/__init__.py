"""Reporting utilities for layernet."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import summarize_epochs, write_summary

__all__ = [
    "write_manifest",
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "summarize_epochs",
    "write_summary",
]
