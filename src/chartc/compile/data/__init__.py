"""Dataflow nodes."""

from __future__ import annotations

from .dataflow import DataflowNode, OutputNode
from .filterinvalid import FilterInvalidNode

__all__ = [
    "DataflowNode",
    "OutputNode",
    "FilterInvalidNode",
]
