"""Scheduling-framework model, NodeNumber plugins, guest dispatch, extender, perf and config helpers."""

__version__ = "0.1.0"

__all__ = [
    "extender",
    "framework",
    "guest",
    "nodenumber",
    "perfdata",
    "schedconfig",
]