import random

import pytest

from kd_tree import KDTree


def sample_tree(seed=1, n=200, k=2, high=30):
    rnd = random.Random(seed)
    tree = KDTree(k)
    for i in range(n):
        tree.insert(tuple(rnd.randint(0, high) for _ in range(k)), i)
    return tree


def forward_keys(tree):
    keys = []
    it = tree.begin()
    while it != tree.end():
        keys.append(it.key)
        it.advance()
    return keys


def test_walk_visits_every_key_once():
    tree = sample_tree()
    keys = forward_keys(tree)
    assert len(keys) == tree.size()
    assert len(set(keys)) == tree.size()
    assert [key for key, _ in tree] == keys


def test_backward_walk_is_reverse():
    tree = sample_tree(seed=2)
    keys = forward_keys(tree)

    backward = []
    it = tree.end()
    for _ in range(tree.size()):
        it.retreat()
        backward.append(it.key)
    assert backward == keys[::-1]


def test_advance_and_retreat_are_inverse():
    tree = sample_tree(seed=3)
    it = tree.begin()
    first = True
    while not it.is_end():
        assert it.copy().advance().retreat() == it, f"advance/retreat mismatch at {it.key}"
        if not first:
            assert it.copy().retreat().advance() == it, f"retreat/advance mismatch at {it.key}"
        first = False
        it.advance()


def test_one_dimension_walk_is_sorted():
    rnd = random.Random(4)
    tree = KDTree(1)
    for _ in range(300):
        tree.insert((rnd.randint(0, 1000),), None)
    keys = forward_keys(tree)
    assert keys == sorted(keys)


def test_empty_tree_endpoints():
    tree = KDTree(2)
    it = tree.end()
    assert tree.begin() == it
    assert it.retreat().is_end()
    assert it.advance().is_end()


def test_end_edges_are_noops():
    tree = sample_tree(seed=5, n=20)
    it = tree.end()
    assert it.advance() == tree.end()

    begin = tree.begin()
    assert begin.copy().retreat() == begin


def test_dereferencing_end_raises():
    tree = sample_tree(seed=6, n=5)
    it = tree.end()
    with pytest.raises(IndexError):
        it.key
    with pytest.raises(IndexError):
        it.value
    with pytest.raises(IndexError):
        it.item


def test_value_can_be_replaced_through_iterator():
    tree = KDTree(2, [((1, 1), "a"), ((2, 2), "b")])
    it = tree.find((2, 2))
    it.value = "changed"
    assert tree[(2, 2)] == "changed"
    assert it.item == ((2, 2), "changed")


def test_end_positions_of_different_trees_differ():
    assert KDTree(2).end() != KDTree(2).end()
    tree = KDTree(2)
    assert tree.end() == tree.end()
