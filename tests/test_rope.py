import pytest

from rope_editor.buffer import BufferValidationError, Internal, Leaf
from rope_editor.buffer import rope


def make_tree() -> rope.RopeNode:
    # "hello world" spread across three leaves
    return rope.concatenate(
        rope.concatenate(Leaf("hel"), Leaf("lo ")), Leaf("world")
    )


def test_length_counts_characters_not_bytes() -> None:
    tree = rope.concatenate(Leaf("héllo"), Leaf("wörld ✓"))

    assert rope.length(tree) == 12
    assert rope.length(None) == 0


def test_internal_weight_is_left_subtree_length() -> None:
    tree = make_tree()

    assert isinstance(tree, Internal)
    assert tree.weight == 6
    assert tree.length == 11
    assert tree.left.weight == 3


def test_concatenate_fills_absent_side_with_empty_leaf() -> None:
    node = rope.concatenate(None, Leaf("abc"))

    assert node.weight == 0
    assert node.left == Leaf("")
    assert rope.flatten(node) == "abc"


def test_char_at_walks_weights() -> None:
    tree = make_tree()

    assert "".join(rope.char_at(tree, i) for i in range(11)) == "hello world"


def test_char_at_out_of_bounds_raises() -> None:
    with pytest.raises(BufferValidationError):
        rope.char_at(make_tree(), 11)
    with pytest.raises(BufferValidationError):
        rope.char_at(Leaf(""), 0)


def test_split_and_concatenate_round_trip() -> None:
    tree = make_tree()

    for i in range(rope.length(tree) + 1):
        left, right = rope.split(tree, i)
        assert rope.flatten(left) == "hello world"[:i]
        assert rope.flatten(right) == "hello world"[i:]
        assert rope.flatten(rope.concatenate(left, right)) == "hello world"


def test_split_leaves_original_tree_untouched() -> None:
    tree = make_tree()

    rope.split(tree, 4)

    assert rope.flatten(tree) == "hello world"


def test_split_absent_tree() -> None:
    assert rope.split(None, 0) == (None, None)


def test_split_out_of_range_raises() -> None:
    with pytest.raises(BufferValidationError):
        rope.split(make_tree(), 12)
    with pytest.raises(BufferValidationError):
        rope.split(make_tree(), -1)


def test_split_multibyte_text_by_character() -> None:
    left, right = rope.split(Leaf("añb€c"), 2)

    assert rope.flatten(left) == "añ"
    assert rope.flatten(right) == "b€c"


def test_insert_adds_text_length() -> None:
    tree = make_tree()

    updated = rope.insert(tree, 5, ", big")

    assert rope.flatten(updated) == "hello, big world"
    assert rope.length(updated) == rope.length(tree) + 5


def test_insert_at_boundaries_and_empty_text() -> None:
    tree = make_tree()

    assert rope.flatten(rope.insert(tree, 0, ">")) == ">hello world"
    assert rope.flatten(rope.insert(tree, 11, "<")) == "hello world<"
    assert rope.insert(tree, 3, "") is tree


def test_insert_then_delete_restores_text() -> None:
    tree = make_tree()
    inserted = rope.insert(tree, 6, "big ")

    removed = rope.delete(inserted, 6, 10)

    assert rope.flatten(removed) == "hello world"
    assert rope.flatten(rope.insert(removed, 6, "big ")) == rope.flatten(inserted)


def test_delete_range() -> None:
    assert rope.flatten(rope.delete(make_tree(), 2, 8)) == "herld"
    assert rope.flatten(rope.delete(make_tree(), 0, 11)) == ""


def test_delete_rejects_bad_ranges() -> None:
    with pytest.raises(BufferValidationError):
        rope.delete(make_tree(), 5, 3)
    with pytest.raises(BufferValidationError):
        rope.delete(make_tree(), 0, 12)


def test_substring() -> None:
    assert rope.substring(make_tree(), 2, 7) == "llo w"


def test_nodes_are_immutable() -> None:
    leaf = Leaf("abc")

    with pytest.raises(AttributeError):
        leaf.text = "xyz"  # type: ignore[misc]


def test_rebalance_preserves_text_and_bounds_leaf_size() -> None:
    tree = Leaf("")
    for i in range(40):
        tree = rope.concatenate(tree, Leaf(f"{i},"))
    text = rope.flatten(tree)

    balanced = rope.rebalance(tree)

    assert rope.flatten(balanced) == text
    assert rope.depth(balanced) < rope.depth(tree)
    assert all(len(leaf.text) <= rope.LEAF_SIZE for leaf in rope.iter_leaves(balanced))


def test_repeated_inserts_keep_depth_bounded() -> None:
    tree: rope.Tree = Leaf("")
    for i in range(3000):
        tree = rope.insert(tree, rope.length(tree), "x")

    assert rope.length(tree) == 3000
    assert rope.depth(tree) <= rope.MAX_DEPTH
    assert rope.flatten(tree) == "x" * 3000
