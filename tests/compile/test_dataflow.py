import itertools

import pytest

from chartc.compile.data.dataflow import DataflowNode, OutputNode
from chartc.core.errors import InvariantViolation


class _Node(DataflowNode):
    def hash(self) -> str:
        return f"Node {self.debug_name}"


def test_setting_parent_registers_child() -> None:
    root = _Node(None, "root")
    a = _Node(root, "a")
    b = _Node(root, "b")
    assert root.children == [a, b]
    assert a.parent is root
    assert root.num_children() == 2


def test_adding_same_child_twice_fails() -> None:
    root = _Node(None, "root")
    a = _Node(root, "a")
    with pytest.raises(InvariantViolation):
        root.add_child(a)


def test_remove_reattaches_children_in_place() -> None:
    root = _Node(None, "root")
    first = _Node(root, "first")
    mid = _Node(root, "mid")
    last = _Node(root, "last")
    leaf1 = _Node(mid, "leaf1")
    leaf2 = _Node(mid, "leaf2")

    mid.remove()

    assert root.children == [first, leaf1, leaf2, last]
    assert leaf1.parent is root
    assert mid.parent is None
    assert mid.children == []


def test_remove_root_fails() -> None:
    with pytest.raises(InvariantViolation):
        _Node(None, "root").remove()


def test_insert_as_parent_of() -> None:
    root = _Node(None, "root")
    leaf = _Node(root, "leaf")
    mid = _Node(None, "mid")

    mid.insert_as_parent_of(leaf)

    assert root.children == [mid]
    assert mid.parent is root
    assert mid.children == [leaf]
    assert leaf.parent is mid


def test_swap_with_parent() -> None:
    root = _Node(None, "root")
    p = _Node(root, "p")
    n = _Node(p, "n")
    c = _Node(n, "c")

    n.swap_with_parent()

    assert root.children == [n]
    assert n.children == [p]
    assert p.children == [c]
    assert c.parent is p
    assert p.parent is n
    assert n.parent is root


def test_base_clone_is_not_supported() -> None:
    with pytest.raises(NotImplementedError):
        _Node(None, "x").clone()


def test_output_nodes_hash_uniquely() -> None:
    root = _Node(None, "root")
    ids = itertools.count(1)
    out1 = OutputNode(root, "data_0", "main", ids=ids)
    out2 = OutputNode(root, "data_0", "main", ids=ids)
    assert out1.hash() != out2.hash()
    assert out1.assemble() is None

    copy = out1.clone()
    assert copy.parent is None
    assert copy.source == "data_0"
    assert copy.hash() != out1.hash()
    assert repr(out1) == "<OutputNode 'main'>"


def test_output_numbering_is_per_compile() -> None:
    ids = itertools.count(1)
    first = [OutputNode(None, "data_0", ids=ids) for _ in range(3)]
    assert [n.hash() for n in first] == ["Output 1", "Output 2", "Output 3"]
    assert first[0].clone().hash() == "Output 4"

    # A later compile with a fresh sequence is unaffected by earlier ones.
    assert OutputNode(None, "data_0", ids=itertools.count(1)).hash() == "Output 1"
    assert OutputNode(None, "data_0").hash() == "Output 1"
