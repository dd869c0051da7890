from __future__ import annotations
import copy as _copy
from bisect import bisect_left, bisect_right
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from kd_iterator import KDIterator
from kd_node import (
    Key,
    KDNode,
    greater_node,
    key_depth,
    leftmost,
    lesser_node,
    next_dim,
    strict_less,
    validate_key,
)


Pair = Tuple[Sequence[Any], Any]


class KDTree:
    """Associative container με key ένα tuple k διαστάσεων (k-d tree).
Σε βάθος d ο κόμβος κάνει split στη διάσταση d % k: αριστερά όσα είναι
αυστηρά μικρότερα στη διάσταση, δεξιά όσα είναι μεγαλύτερα ή ίσα."""

    def __init__(self, k: int, pairs: Optional[Iterable[Pair]] = None):
        "Αρχικοποιεί άδειο δέντρο k διαστάσεων, ή balanced δέντρο από ζεύγη (key, value)."
        if k < 1:
            raise ValueError("Can not construct KDTree with zero dimension")

        self.k = k
        self.root: Optional[KDNode] = None
        self._size = 0

        if pairs is not None:
            self._bulk_load(pairs)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> "KDTree":
        "Κατασκευή από ζεύγη, το k βγαίνει από το πρώτο key."
        pairs = list(pairs)
        if not pairs:
            raise ValueError("Cannot infer k dimensions from empty input")
        return cls(len(tuple(pairs[0][0])), pairs)

    @property
    def dimensions(self) -> int:
        return self.k

    # bulk construction
    def _bulk_load(self, pairs: Iterable[Pair]) -> None:
        items = [(validate_key(key, self.k), value) for key, value in pairs]

        #stable sort kata olo to key (idio me to compare_key sto dim 0)
        items.sort(key=lambda item: item[0])

        #dedup apo to telos, kratame tin teleutaia emfanisi kathe key
        unique: List[Tuple[Key, Any]] = []
        for key, value in reversed(items):
            if unique and unique[-1][0] == key:
                continue
            unique.append((key, value))
        unique.reverse()

        self._size = len(unique)
        self.root = self._build(unique)

    def _split_index(self, items: List[Tuple[Key, Any]], dim: int) -> int:
        """Θέση του split σε items ταξινομημένα στο dim.
Αριστερά μένουν μόνο όσα είναι αυστηρά μικρότερα, οπότε από τα δύο όρια
της ομάδας ίσων γύρω από το lower median κρατάμε το πιο κοντινό."""
        median = (len(items) - 1) // 2
        coords = [item[0][dim] for item in items]
        pivot = coords[median]

        first_equal = bisect_left(coords, pivot)
        first_greater = bisect_right(coords, pivot)
        if first_greater < len(items) and first_greater - median < median - first_equal:
            return first_greater
        return first_equal

    def _build(self, items: List[Tuple[Key, Any]]) -> Optional[KDNode]:
        "Κατασκευή με median split χωρίς αναδρομή, η διάσταση κάνει κύκλο ανά επίπεδο."
        root: Optional[KDNode] = None

        #(items, dim, goneas, an paei aristera)
        stack: List[Tuple[List[Tuple[Key, Any]], int, Optional[KDNode], bool]] = [(items, 0, None, False)]
        while stack:
            chunk, dim, parent, is_left = stack.pop()
            if not chunk:
                continue

            chunk = sorted(chunk, key=lambda item: item[0][dim])
            split = self._split_index(chunk, dim)

            key, value = chunk[split]
            node = KDNode(key=key, value=value, parent=parent)
            if parent is None:
                root = node
            elif is_left:
                parent.left = node
            else:
                parent.right = node

            child_dim = next_dim(dim, self.k)
            stack.append((chunk[split + 1 :], child_dim, node, False))
            stack.append((chunk[:split], child_dim, node, True))

        return root

    # size / endpoints
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        "Επιστρέφει πόσα διαφορετικά keys περιέχει το δέντρο."
        return self._size

    def is_empty(self) -> bool:
        "Επιστρέφει True αν το δέντρο είναι άδειο."
        return self.root is None

    def begin(self) -> KDIterator:
        if self.root is None:
            return self.end()
        return KDIterator(self, leftmost(self.root))

    def end(self) -> KDIterator:
        return KDIterator(self, None)

    # find / insert
    def _locate(self, key: Key) -> Tuple[Optional[KDNode], int]:
        "Επιστρέφει τον κόμβο με το key και τη διάσταση split του (ή None)."
        node = self.root
        dim = 0
        while node is not None:
            if node.key == key:
                return node, dim
            node = node.left if strict_less(dim, key, node.key) else node.right
            dim = next_dim(dim, self.k)
        return None, dim

    def find(self, key: Sequence[Any]) -> KDIterator:
        "Iterator στο key, ή end() αν δεν υπάρχει."
        node, _ = self._locate(validate_key(key, self.k))
        return KDIterator(self, node)

    def insert(self, key: Sequence[Any], value: Any) -> bool:
        """Εισάγει (key, value). Αν το key υπάρχει ήδη αλλάζει μόνο το value.
Επιστρέφει True αν μπήκε νέος κόμβος."""
        key = validate_key(key, self.k)

        parent: Optional[KDNode] = None
        node = self.root
        dim = 0
        go_left = False

        while node is not None:
            if node.key == key:
                node.value = value
                return False
            parent = node
            go_left = strict_less(dim, key, node.key)
            node = node.left if go_left else node.right
            dim = next_dim(dim, self.k)

        new_node = KDNode(key=key, value=value, parent=parent)
        if parent is None:
            self.root = new_node
        elif go_left:
            parent.left = new_node
        else:
            parent.right = new_node

        self._size += 1
        return True

    # min / max
    def _find_extreme(
        self,
        node: Optional[KDNode],
        dim: int,
        start_dim: int,
        minimum: bool = True,
    ) -> Optional[KDNode]:
        """Ελάχιστο (ή μέγιστο) στη διάσταση dim μέσα στο υποδέντρο node.
Σε κόμβο με split dim == dim το δεξί (για max το αριστερό) υποδέντρο
ψάχνεται μόνο αν ο καλύτερος μέχρι τώρα ισοβαθμεί με τον κόμβο στο dim."""
        best: Optional[KDNode] = None
        pick = lesser_node if minimum else greater_node

        #(kombos, split dim, an exei teleiosei to proto ypodentro)
        stack: List[Tuple[Optional[KDNode], int, bool]] = [(node, start_dim, False)]
        while stack:
            current, cur_dim, first_done = stack.pop()
            if current is None:
                continue
            child_dim = next_dim(cur_dim, self.k)

            if not first_done:
                best = pick(dim, best, current)
                stack.append((current, cur_dim, True))
                stack.append((current.left if minimum else current.right, child_dim, False))
                continue

            if minimum:
                tie = not strict_less(dim, best.key, current.key)
            else:
                tie = not strict_less(dim, current.key, best.key)
            if cur_dim != dim or tie:
                stack.append((current.right if minimum else current.left, child_dim, False))

        return best

    def _check_dim(self, dim: int, strict: bool) -> int:
        if strict and not 0 <= dim < self.k:
            raise ValueError(f"Dimension must be in [0, {self.k}), got {dim}")
        return dim % self.k

    def find_min(self, dim: int, strict: bool = False) -> KDIterator:
        "Iterator στον κόμβο με το ελάχιστο στη διάσταση dim (end() αν άδειο)."
        dim = self._check_dim(dim, strict)
        return KDIterator(self, self._find_extreme(self.root, dim, 0, minimum=True))

    def find_max(self, dim: int, strict: bool = False) -> KDIterator:
        "Iterator στον κόμβο με το μέγιστο στη διάσταση dim (end() αν άδειο)."
        dim = self._check_dim(dim, strict)
        return KDIterator(self, self._find_extreme(self.root, dim, 0, minimum=False))

    # erase
    def _has_tie(self, node: KDNode, dim: int, start_dim: int, target: KDNode) -> bool:
        "True αν άλλος κόμβος του υποδέντρου έχει ίδια τιμή με το target (μέγιστο) στο dim."
        stack: List[Tuple[Optional[KDNode], int]] = [(node, start_dim)]
        while stack:
            current, cur_dim = stack.pop()
            if current is None:
                continue
            below = strict_less(dim, current.key, target.key)
            if current is not target and not below:
                return True
            child_dim = next_dim(cur_dim, self.k)
            stack.append((current.right, child_dim))
            #to aristero einai afstira mikrotero apo ton kombo
            if cur_dim != dim or not below:
                stack.append((current.left, child_dim))
        return False

    def _detach_leaf(self, node: KDNode) -> None:
        parent = node.parent
        if parent is None:
            self.root = None
        elif parent.left is node:
            parent.left = None
        else:
            parent.right = None
        node.parent = None

        self._size -= 1
        if self._size == 0:
            self.root = None

    def _remove(self, node: KDNode, dim: int) -> None:
        """Σβήνει τον κόμβο node που κάνει split στη διάσταση dim.
Όσο δεν είναι φύλλο, αντιγράφει μέσα του τον successor (ή predecessor)
και συνεχίζει με τη διαγραφή εκείνου."""
        while not node.is_leaf():
            child_dim = next_dim(dim, self.k)

            if node.right is not None:
                replacement = self._find_extreme(node.right, dim, child_dim, minimum=True)
            else:
                replacement = self._find_extreme(node.left, dim, child_dim, minimum=False)
                if self._has_tie(node.left, dim, child_dim, replacement):
                    #me isa sto dim to max den xorizei afstira, to ypodentro paei dexia
                    node.right, node.left = node.left, None
                    replacement = self._find_extreme(node.right, dim, child_dim, minimum=True)

            node.key = replacement.key
            node.value = replacement.value

            steps = 0
            current = replacement
            while current is not node:
                current = current.parent
                steps += 1

            node = replacement
            dim = (dim + steps) % self.k

        self._detach_leaf(node)

    def erase(self, key: Sequence[Any]) -> bool:
        "Σβήνει το key. Επιστρέφει False αν δεν υπήρχε."
        node, dim = self._locate(validate_key(key, self.k))
        if node is None:
            return False
        self._remove(node, dim)
        return True

    def erase_at(self, position: KDIterator) -> KDIterator:
        """Σβήνει το στοιχείο στη θέση position.
Για φύλλο επιστρέφει τον πρώην γονέα, αλλιώς την ίδια θέση (έχει πλέον το νέο περιεχόμενο)."""
        if position.tree is not self:
            raise ValueError("Iterator does not belong to this tree")

        node = position.node
        if node is None:
            return position

        #kombos pou exei idi sbistei (i meta apo clear) den ftanei sti riza
        top = node
        while top.parent is not None:
            top = top.parent
        if top is not self.root:
            raise ValueError("Iterator position is no longer part of this tree")

        result = node.parent if node.is_leaf() else node
        self._remove(node, key_depth(node) % self.k)
        return KDIterator(self, result)

    # mapping protocol
    def __getitem__(self, key: Sequence[Any]) -> Any:
        node, _ = self._locate(validate_key(key, self.k))
        if node is None:
            raise KeyError(key)
        return node.value

    def __setitem__(self, key: Sequence[Any], value: Any) -> None:
        self.insert(key, value)

    def __delitem__(self, key: Sequence[Any]) -> None:
        if not self.erase(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        try:
            key = validate_key(key, self.k)
        except (TypeError, ValueError):
            return False
        node, _ = self._locate(key)
        return node is not None

    def get(self, key: Sequence[Any], default: Any = None) -> Any:
        node, _ = self._locate(validate_key(key, self.k))
        return default if node is None else node.value

    def __iter__(self) -> Iterator[Tuple[Key, Any]]:
        it = self.begin()
        while not it.is_end():
            yield it.item
            it.advance()

    def items(self) -> List[Tuple[Key, Any]]:
        return list(self)

    def keys(self) -> List[Key]:
        return [key for key, _ in self]

    def values(self) -> List[Any]:
        return [value for _, value in self]

    # copy / teardown
    @staticmethod
    def _copy_nodes(source: Optional[KDNode], deep_values: bool = False, memo=None) -> Optional[KDNode]:
        "Αντίγραφο όλων των κόμβων (χωρίς αναδρομή), με σωστά parent links."
        if source is None:
            return None

        def clone(node: KDNode, parent: Optional[KDNode]) -> KDNode:
            value = _copy.deepcopy(node.value, memo) if deep_values else node.value
            return KDNode(key=node.key, value=value, parent=parent)

        new_root = clone(source, None)
        stack = [(source, new_root)]
        while stack:
            src, dst = stack.pop()
            if src.left is not None:
                dst.left = clone(src.left, dst)
                stack.append((src.left, dst.left))
            if src.right is not None:
                dst.right = clone(src.right, dst)
                stack.append((src.right, dst.right))
        return new_root

    def clear(self) -> None:
        "Αποδεσμεύει όλους τους κόμβους, τα παλιά iterators δεν ισχύουν πλέον."
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
            node.left = node.right = node.parent = None

        self.root = None
        self._size = 0

    def assign(self, other: "KDTree") -> "KDTree":
        "Copy-assignment: σβήνει τα δικά του και αντιγράφει όλο το other."
        if other is self:
            return self
        self.clear()
        self.k = other.k
        self.root = self._copy_nodes(other.root)
        self._size = other._size
        return self

    def copy(self) -> "KDTree":
        return KDTree(self.k).assign(self)

    def __copy__(self) -> "KDTree":
        return self.copy()

    def __deepcopy__(self, memo) -> "KDTree":
        result = KDTree(self.k)
        memo[id(self)] = result
        result.root = self._copy_nodes(self.root, deep_values=True, memo=memo)
        result._size = self._size
        return result

    # diagnostics
    def depth(self) -> int:
        "Ύψος του δέντρου (0 για άδειο)."
        height = 0
        stack = [(self.root, 1)] if self.root is not None else []
        while stack:
            node, level = stack.pop()
            height = max(height, level)
            for child in (node.left, node.right):
                if child is not None:
                    stack.append((child, level + 1))
        return height

    def check_invariant(self) -> bool:
        """Ελέγχει parent links, πλήθος κόμβων και την k-d ιδιότητα.
Κάθε περιορισμός είναι (dim, τιμή του προγόνου, αν ο κόμβος είναι στο αριστερό υποδέντρο)."""
        if self.root is None:
            return self._size == 0
        if self.root.parent is not None:
            return False

        count = 0
        stack: List[Tuple[KDNode, int, Tuple[Tuple[int, Any, bool], ...]]] = [(self.root, 0, ())]
        while stack:
            node, dim, bounds = stack.pop()
            count += 1

            for bound_dim, pivot, is_left in bounds:
                below = node.key[bound_dim] < pivot
                if below != is_left:
                    return False

            child_dim = next_dim(dim, self.k)
            pivot = node.key[dim]
            for child, is_left in ((node.left, True), (node.right, False)):
                if child is None:
                    continue
                if child.parent is not node:
                    return False
                stack.append((child, child_dim, bounds + ((dim, pivot, is_left),)))

        return count == self._size

    def __repr__(self) -> str:
        return f"KDTree(k={self.k}, size={self._size})"
