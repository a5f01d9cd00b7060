"""
Dataflow graph nodes.

A compiled view's data pipeline is a tree of nodes, each owning one parent and any
number of children. Every concrete node declares the fields it reads and produces,
hashes its semantic content (so an enclosing pipeline can merge identical siblings),
and assembles into one renderer transform (or None when it contributes nothing).

Notes:
    - Graphs are built per compile and never shared across compiles; use `clone()`
      to replicate a node into another branch. Clones have no parent.
    - Setting `parent` registers the node as a child of the new parent.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from chartc.core.errors import InvariantViolation
from chartc.core.typing import JsonDict

__all__ = [
    "DataflowNode",
    "OutputNode",
]


class DataflowNode(ABC):
    """Abstract node of the dataflow tree."""

    def __init__(self, parent: DataflowNode | None, debug_name: str | None = None):
        self._children: list[DataflowNode] = []
        self._parent: DataflowNode | None = None
        self.debug_name = debug_name
        self.parent = parent

    def clone(self) -> DataflowNode:
        raise NotImplementedError(f"Cannot clone {type(self).__name__}")

    @abstractmethod
    def hash(self) -> str:
        """Stable string identifying the node's semantic content."""

    def dependent_fields(self) -> set[str]:
        return set()

    def produced_fields(self) -> set[str]:
        return set()

    def assemble(self) -> Any:
        return None

    # -- graph structure ---------------------------------------------------

    @property
    def parent(self) -> DataflowNode | None:
        return self._parent

    @parent.setter
    def parent(self, parent: DataflowNode | None) -> None:
        self._parent = parent
        if parent is not None:
            parent.add_child(self)

    @property
    def children(self) -> list[DataflowNode]:
        return self._children

    def num_children(self) -> int:
        return len(self._children)

    def add_child(self, child: DataflowNode, loc: int | None = None) -> None:
        if child in self._children:
            raise InvariantViolation("Attempt to add the same child twice.")
        if loc is None:
            self._children.append(child)
        else:
            self._children.insert(loc, child)

    def remove_child(self, old_child: DataflowNode) -> int:
        """Detach a child, returning the position it occupied."""
        loc = self._children.index(old_child)
        del self._children[loc]
        return loc

    def remove(self) -> None:
        """Remove this node, reattaching its children to its parent in its place."""
        parent = self._parent
        if parent is None:
            raise InvariantViolation("Cannot remove a node without a parent.")
        loc = parent.remove_child(self)
        for child in list(self._children):
            child._parent = parent
            parent.add_child(child, loc)
            loc += 1
        self._children = []
        self._parent = None

    def insert_as_parent_of(self, other: DataflowNode) -> None:
        """Splice this (detached) node between `other` and its parent."""
        parent = other.parent
        if parent is None:
            raise InvariantViolation("Cannot insert above a root node.")
        loc = parent.remove_child(other)
        self._parent = parent
        parent.add_child(self, loc)
        other._parent = None
        other.parent = self

    def swap_with_parent(self) -> None:
        """Move this node above its parent; the old parent takes over this node's children."""
        parent = self._parent
        if parent is None or parent.parent is None:
            raise InvariantViolation("Cannot swap a node without a grandparent.")
        grandparent = parent.parent

        for child in list(self._children):
            child._parent = parent
            parent.add_child(child)
        self._children = []

        parent.remove_child(self)
        grandparent_loc = grandparent.remove_child(parent)
        self._parent = grandparent
        grandparent.add_child(self, grandparent_loc)
        parent._parent = self
        self.add_child(parent)

    def __repr__(self) -> str:
        name = f" {self.debug_name!r}" if self.debug_name else ""
        return f"<{type(self).__name__}{name}>"


class OutputNode(DataflowNode):
    """
    Named output of the pipeline, e.g. the data source a mark reads.

    Output nodes are referenced by name from marks and are never merged. Nodes sharing
    one `ids` iterator (one per compile) hash uniquely; a node built without one
    starts its own sequence, and clones draw from the original's.
    """

    def __init__(
        self,
        parent: DataflowNode | None,
        source: str,
        debug_name: str | None = None,
        *,
        ids: Iterator[int] | None = None,
    ):
        super().__init__(parent, debug_name)
        self.source = source
        self._ids = ids if ids is not None else itertools.count(1)
        self._hash = f"Output {next(self._ids)}"

    def clone(self) -> OutputNode:
        return OutputNode(None, self.source, self.debug_name, ids=self._ids)

    def hash(self) -> str:
        return self._hash

    def assemble(self) -> JsonDict | None:
        return None
