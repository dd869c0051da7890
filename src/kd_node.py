from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple


Key = Tuple[Any, ...]  # (c0, c1, ..., c_{k-1})


@dataclass(eq=False)
class KDNode:
    "Κόμβος ενός k-d tree: κλειδί, τιμή, παιδιά και back-reference στον γονέα."

    key: Key
    value: Any
    parent: Optional["KDNode"] = field(default=None, repr=False)  #mono gia traversal, oxi ownership
    left: Optional["KDNode"] = None
    right: Optional["KDNode"] = None

    def is_leaf(self) -> bool:
        "Επιστρέφει True αν ο κόμβος δεν έχει παιδιά."
        return self.left is None and self.right is None


def next_dim(dim: int, k: int) -> int:
    return (dim + 1) % k


def validate_key(key: Sequence[Any], k: int) -> Key:
    "Μετατρέπει το key σε tuple και ελέγχει ότι έχει k διαστάσεις."
    if isinstance(key, (str, bytes)):
        raise TypeError(f"Key must be a sequence of coordinates, not {type(key).__name__}")
    key = tuple(key)
    if len(key) != k:
        raise ValueError(f"Key must have length equal to k dimensions ({k}), got {len(key)}")
    return key


def compare_key(dim: int, a: Key, b: Key) -> bool:
    """Σύγκριση a < b στη διάσταση dim.
Αν οι συντεταγμένες είναι ίσες, αποφασίζει η λεξικογραφική σύγκριση όλου του key."""
    if a[dim] != b[dim]:
        return a[dim] < b[dim]
    return a < b


def strict_less(dim: int, a: Key, b: Key) -> bool:
    "Σύγκριση μόνο στη διάσταση dim, χωρίς tie-break (για το descent)."
    return a[dim] < b[dim]


def lesser_node(dim: int, a: Optional[KDNode], b: Optional[KDNode]) -> Optional[KDNode]:
    "Επιστρέφει τον μικρότερο από δύο κόμβους στη διάσταση dim (None = απών)."
    if a is None:
        return b
    if b is None:
        return a
    return a if compare_key(dim, a.key, b.key) else b


def greater_node(dim: int, a: Optional[KDNode], b: Optional[KDNode]) -> Optional[KDNode]:
    "Επιστρέφει τον μεγαλύτερο από δύο κόμβους στη διάσταση dim (None = απών)."
    if a is None:
        return b
    if b is None:
        return a
    return a if compare_key(dim, b.key, a.key) else b


def key_depth(node: KDNode) -> int:
    "Πόσους προγόνους έχει ο κόμβος μέχρι τη ρίζα."
    depth = 0
    parent = node.parent
    while parent is not None:
        depth += 1
        parent = parent.parent
    return depth


def leftmost(node: KDNode) -> KDNode:
    while node.left is not None:
        node = node.left
    return node


def rightmost(node: KDNode) -> KDNode:
    while node.right is not None:
        node = node.right
    return node
