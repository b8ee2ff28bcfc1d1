"""Persistent rope tree backing buffer content.

Nodes are frozen once built. ``split``/``concatenate`` always allocate new
nodes and reuse untouched subtrees, so any number of tree versions (the live
buffer, undo and redo entries) can share structure safely.

All offsets are ``str`` code-point offsets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from rope_editor.runtime import telemetry

from .validation import clamp, ensure_index, ensure_range

LEAF_SIZE = 512
MAX_DEPTH = 48


@dataclass(frozen=True, slots=True)
class Leaf:
    """Text fragment with no children."""

    text: str = ""

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def depth(self) -> int:
        return 0


@dataclass(frozen=True, slots=True, eq=False)
class Internal:
    """Two children plus the cached length of the left subtree (``weight``)."""

    left: "RopeNode"
    right: "RopeNode"
    weight: int = field(init=False)
    length: int = field(init=False)
    depth: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight", self.left.length)
        object.__setattr__(self, "length", self.left.length + self.right.length)
        object.__setattr__(self, "depth", 1 + max(self.left.depth, self.right.depth))


RopeNode = Union[Leaf, Internal]
Tree = Optional[RopeNode]
EMPTY = Leaf("")


def from_text(text: str) -> Leaf:
    return Leaf(text)


def length(node: Tree) -> int:
    return 0 if node is None else node.length


def depth(node: Tree) -> int:
    return 0 if node is None else node.depth


def char_at(node: Tree, index: int) -> str:
    """Return the character at ``index`` by walking the weights downwards."""

    ensure_index(index, length(node), inclusive=False)
    current = node
    while isinstance(current, Internal):
        if index < current.weight:
            current = current.left
        else:
            index -= current.weight
            current = current.right
    assert current is not None
    return current.text[index]


def concatenate(left: Tree, right: Tree) -> Internal:
    return Internal(
        left if left is not None else EMPTY,
        right if right is not None else EMPTY,
    )


def split(node: Tree, index: int) -> Tuple[Tree, Tree]:
    """Partition ``node`` into the text before ``index`` and from ``index`` on."""

    if node is None:
        return None, None
    ensure_index(index, node.length)
    return _split(node, index)


def _split(node: RopeNode, index: int) -> Tuple[RopeNode, RopeNode]:
    if isinstance(node, Leaf):
        index = clamp(index, node.length)
        return Leaf(node.text[:index]), Leaf(node.text[index:])
    if index < node.weight:
        left, right = _split(node.left, index)
        return left, concatenate(right, node.right)
    left, right = _split(node.right, index - node.weight)
    return concatenate(node.left, left), right


def insert(root: Tree, index: int, text: str) -> Tree:
    ensure_index(index, length(root))
    if not text:
        return root
    left, right = split(root, index)
    return _bounded(concatenate(concatenate(left, Leaf(text)), right))


def delete(root: Tree, start: int, end: int) -> Tree:
    ensure_range(start, end, length(root))
    if start == end:
        return root
    left, rest = split(root, start)
    _removed, right = split(rest, end - start)
    return _bounded(concatenate(left, right))


def substring(root: Tree, start: int, end: int) -> str:
    ensure_range(start, end, length(root))
    _before, rest = split(root, start)
    middle, _after = split(rest, end - start)
    return flatten(middle)


def iter_leaves(node: Tree) -> Iterator[Leaf]:
    """Yield leaves left to right without recursing."""

    stack: List[RopeNode] = [node] if node is not None else []
    while stack:
        current = stack.pop()
        if isinstance(current, Leaf):
            yield current
        else:
            stack.append(current.right)
            stack.append(current.left)


def flatten(node: Tree) -> str:
    return "".join(leaf.text for leaf in iter_leaves(node))


def rebalance(node: Tree) -> Tree:
    """Rebuild ``node`` as a balanced tree of fragments of at most ``LEAF_SIZE``."""

    if node is None:
        return None
    text = flatten(node)
    fragments = [text[i : i + LEAF_SIZE] for i in range(0, len(text), LEAF_SIZE)]
    if not fragments:
        return Leaf("")
    return _build(fragments, 0, len(fragments))


def _build(fragments: List[str], lo: int, hi: int) -> RopeNode:
    if hi - lo == 1:
        return Leaf(fragments[lo])
    mid = (lo + hi) // 2
    return Internal(_build(fragments, lo, mid), _build(fragments, mid, hi))


def _bounded(root: RopeNode) -> RopeNode:
    if root.depth <= MAX_DEPTH:
        return root
    balanced = rebalance(root)
    assert balanced is not None
    telemetry.record_event(
        "rope.rebalance",
        level="debug",
        data={"length": root.length, "depth": root.depth, "new_depth": balanced.depth},
        logger_name="rope_editor.rope",
    )
    return balanced


__all__ = [
    "EMPTY",
    "Internal",
    "LEAF_SIZE",
    "Leaf",
    "MAX_DEPTH",
    "RopeNode",
    "Tree",
    "char_at",
    "concatenate",
    "delete",
    "depth",
    "flatten",
    "from_text",
    "insert",
    "iter_leaves",
    "length",
    "rebalance",
    "split",
    "substring",
]
