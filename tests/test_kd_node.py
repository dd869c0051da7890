import pytest

from kd_node import (
    KDNode,
    compare_key,
    greater_node,
    key_depth,
    leftmost,
    lesser_node,
    next_dim,
    rightmost,
    strict_less,
    validate_key,
)


def test_compare_key_uses_dimension_first():
    assert compare_key(1, (9, 1), (0, 2))
    assert not compare_key(0, (9, 1), (0, 2))


def test_compare_key_tie_break_on_full_key():
    #isa sto dim 0, apofasizei to ypoloipo key
    assert compare_key(0, (1, 3), (1, 5))
    assert not compare_key(0, (1, 5), (1, 3))
    assert not compare_key(0, (1, 3), (1, 3))


def test_strict_less_has_no_tie_break():
    assert not strict_less(0, (1, 3), (1, 5))
    assert not strict_less(0, (1, 5), (1, 3))
    assert strict_less(1, (1, 3), (1, 5))


def test_lesser_and_greater_node():
    a = KDNode(key=(1, 7), value="a")
    b = KDNode(key=(1, 2), value="b")

    assert lesser_node(0, a, None) is a
    assert lesser_node(0, None, b) is b
    assert lesser_node(0, None, None) is None
    assert lesser_node(0, a, b) is b, "tie on dim 0 must fall back to full key"
    assert greater_node(0, a, b) is a
    assert lesser_node(1, a, b) is b
    assert greater_node(1, b, a) is a


def test_validate_key():
    assert validate_key([1, 2], 2) == (1, 2)
    with pytest.raises(ValueError):
        validate_key((1, 2, 3), 2)


def test_next_dim_cycles():
    assert [next_dim(d, 3) for d in range(3)] == [1, 2, 0]
    assert next_dim(0, 1) == 0


def test_depth_and_extremes_of_linked_nodes():
    root = KDNode(key=(5,), value=None)
    root.left = KDNode(key=(3,), value=None, parent=root)
    root.left.left = KDNode(key=(1,), value=None, parent=root.left)
    root.right = KDNode(key=(8,), value=None, parent=root)

    assert key_depth(root) == 0
    assert key_depth(root.left.left) == 2
    assert leftmost(root) is root.left.left
    assert rightmost(root) is root.right
    assert root.right.is_leaf()
    assert not root.is_leaf()
