"""Reporting utilities for AdaptNets."""

from .artifacts import CheckpointWriter, load_checkpoint, save_checkpoint, write_manifest
from .metrics import CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "CheckpointWriter",
    "CsvSink",
    "JsonlSink",
    "MetricsCapture",
    "PlotAdapter",
    "load_checkpoint",
    "save_checkpoint",
    "write_manifest",
    "write_summary",
]
