from __future__ import annotations
from typing import TYPE_CHECKING, Any, Optional, Tuple

from kd_node import Key, KDNode, leftmost, rightmost

if TYPE_CHECKING:
    from kd_tree import KDTree


class KDIterator:
    """Bidirectional iterator πάνω σε KDTree (in-order: left, node, right).
Δεν εξαρτάται από τις διαστάσεις, κινείται μόνο με τα parent back-references.
Η θέση end() αντιστοιχεί σε node=None."""

    __slots__ = ("tree", "node")

    def __init__(self, tree: "KDTree", node: Optional[KDNode] = None):
        self.tree = tree
        self.node = node

    def is_end(self) -> bool:
        return self.node is None

    def _checked(self) -> KDNode:
        if self.node is None:
            raise IndexError("Cannot dereference end iterator")
        return self.node

    @property
    def key(self) -> Key:
        return self._checked().key

    @property
    def value(self) -> Any:
        return self._checked().value

    @value.setter
    def value(self, value: Any) -> None:
        #allazei mono to value, to key den allazei pote apo ekso
        self._checked().value = value

    @property
    def item(self) -> Tuple[Key, Any]:
        node = self._checked()
        return node.key, node.value

    def advance(self) -> "KDIterator":
        "Μετακίνηση στο επόμενο στοιχείο (no-op στο end)."
        node = self.node
        if node is None:
            return self

        #an iparxei right child, pame sto leftmost tou
        if node.right is not None:
            self.node = leftmost(node.right)
            return self

        #alliws anevainoume mexri na ftasoume apo aristero paidi
        child = node
        node = node.parent
        while node is not None and node.left is not child:
            child = node
            node = node.parent
        self.node = node
        return self

    def retreat(self) -> "KDIterator":
        "Μετακίνηση στο προηγούμενο στοιχείο (από το end πάμε στο rightmost)."
        node = self.node
        if node is None:
            root = self.tree.root
            if root is not None:
                self.node = rightmost(root)
            return self

        if node.left is not None:
            self.node = rightmost(node.left)
            return self

        #apo to begin() den pame pouthena
        if self == self.tree.begin():
            return self

        child = node
        node = node.parent
        while node is not None and node.right is not child:
            child = node
            node = node.parent
        self.node = node
        return self

    def copy(self) -> "KDIterator":
        return KDIterator(self.tree, self.node)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KDIterator):
            return NotImplemented
        return self.tree is other.tree and self.node is other.node

    def __repr__(self) -> str:
        if self.node is None:
            return "KDIterator(end)"
        return f"KDIterator({self.node.key!r} -> {self.node.value!r})"
