"""B-tree engine.

Order ``m`` bounds every node to at most ``m - 1`` keys and ``m``
children; every node but the root keeps at least ``ceil(m / 2) - 1`` keys.

Two insertion strategies share one ``_split_child``:

- even orders split full nodes pre-emptively on the way down, so a key
  always lands in a leaf with room;
- odd orders cannot split a full node (``m - 1`` keys, an even count)
  into two halves that both reach the minimum, so the leaf is allowed to
  overflow to ``m`` keys and the split propagates upward instead.
"""

import logging
import math
from collections import deque
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from ..config import TreeConfig
from ..core.base import BaseTree
from ..core.node import BTreeNode
from ..core.oplog import (BorrowStep, DeleteStep, InsertStep, MergeStep, SearchStep,
                          SplitStep)
from ..errors import Violation

logger = logging.getLogger(__name__)


class BTree(BaseTree):
    """Multi-way balanced search tree.

    Args:
        order: Maximum children per node; overrides ``config.b_tree_order``
        config: Engine configuration

    Raises:
        InvalidTreeConfigError: If the order is not an integer >= 3
    """

    tree_type = 'b-tree'

    def __init__(self, order: Optional[int] = None, config: Optional[TreeConfig] = None):
        if order is not None:
            config = replace(config or TreeConfig(), b_tree_order=order)
        super().__init__(config)

        self.order = self.config.b_tree_order
        self.max_keys = self.order - 1
        self.min_keys = math.ceil(self.order / 2) - 1
        self.preemptive_split = self.order % 2 == 0
        self.root = self._new_btree_node(is_leaf=True)
        logger.info("Created B-tree of order %d", self.order)

    def _new_btree_node(self, is_leaf: bool) -> BTreeNode:
        return BTreeNode(is_leaf=is_leaf, node_id=self._next_id())

    # Search

    def _locate(self, key: Any) -> Optional[Tuple[BTreeNode, int]]:
        node = self.root
        while True:
            index = node.find_child_index(key)
            if index < len(node.keys) and node.keys[index] == key:
                return node, index
            if node.is_leaf:
                return None
            node = node.children[index]

    def _descend(self, key: Any, record_cls) -> Optional[Tuple[BTreeNode, int]]:
        """Logged version of :meth:`_locate`."""
        node = self.root
        while True:
            index = node.find_child_index(key)
            if index < len(node.keys) and node.keys[index] == key:
                self._record(record_cls(step='found', value=key, node=node.id, position=index))
                return node, index
            if node.is_leaf:
                self._record(record_cls(step='not_found_leaf', value=key, node=node.id))
                return None
            self._record(record_cls(
                step='traverse_child', value=key, node=node.id, child_index=index,
            ))
            node = node.children[index]

    def search(self, value: Any) -> Optional[Tuple[BTreeNode, int]]:
        """Find a key.

        Returns:
            ``(node, index)`` of the key, or None
        """
        key = self._coerce_value(value, SearchStep)
        if key is None:
            return None
        return self._descend(key, SearchStep)

    # Insert

    def insert(self, value: Any) -> Optional[BTreeNode]:
        """Insert a key.

        Returns:
            The node holding the key once any splits are done, or None for a
            duplicate or invalid key
        """
        key = self._coerce_value(value, InsertStep)
        if key is None:
            return None

        if self._locate(key) is not None:
            self._record(InsertStep(
                step='duplicate', value=key, message='Duplicate keys not allowed in B-tree',
            ))
            return None

        if self.preemptive_split:
            if self.root.is_full(self.max_keys):
                self._record(InsertStep(step='root_full_split', value=key, node=self.root.id))
                self._grow_root()
                self._split_child(self.root, 0)
            holder = self._insert_non_full(self.root, key)
        else:
            holder = self._insert_with_overflow(key)

        self.size += 1
        self._update_depths(self.root)
        return holder

    def _grow_root(self) -> None:
        new_root = self._new_btree_node(is_leaf=False)
        new_root.children.append(self.root)
        self.root.parent = new_root
        self.root = new_root
        self._record(InsertStep(step='new_root', node=new_root.id))

    def _insert_non_full(self, node: BTreeNode, key: Any) -> BTreeNode:
        while not node.is_leaf:
            index = node.find_child_index(key)
            if node.children[index].is_full(self.max_keys):
                self._record(InsertStep(
                    step='child_full_split', value=key, node=node.id, child_index=index,
                ))
                self._split_child(node, index)
                if key > node.keys[index]:
                    index += 1
            else:
                self._record(InsertStep(
                    step='traverse_child', value=key, node=node.id, child_index=index,
                ))
            node = node.children[index]

        position = node.insert_key(key)
        self._record(InsertStep(step='insert_leaf', value=key, node=node.id, position=position))
        return node

    def _insert_with_overflow(self, key: Any) -> BTreeNode:
        node = self.root
        while not node.is_leaf:
            index = node.find_child_index(key)
            self._record(InsertStep(
                step='traverse_child', value=key, node=node.id, child_index=index,
            ))
            node = node.children[index]

        position = node.insert_key(key)
        self._record(InsertStep(step='insert_leaf', value=key, node=node.id, position=position))

        while len(node.keys) > self.max_keys:
            if node.parent is None:
                self._record(InsertStep(step='root_overflow_split', value=key, node=node.id))
                self._grow_root()
            parent = node.parent
            index = parent.children.index(node)
            self._record(InsertStep(
                step='overflow_split', value=key, node=node.id, child_index=index,
            ))
            self._split_child(parent, index)
            node = parent

        # A split may have promoted the key out of its leaf
        return self._locate(key)[0]

    def _split_child(self, parent: BTreeNode, index: int) -> None:
        """Move the upper half of ``parent.children[index]`` into a new sibling.

        The median key is promoted into ``parent`` at ``index``.
        """
        child = parent.children[index]
        mid = len(child.keys) // 2
        middle_key = child.keys[mid]

        sibling = self._new_btree_node(is_leaf=child.is_leaf)
        sibling.keys = child.keys[mid + 1:]
        child.keys = child.keys[:mid]
        if not child.is_leaf:
            sibling.children = child.children[mid + 1:]
            child.children = child.children[:mid + 1]
            for grandchild in sibling.children:
                grandchild.parent = sibling

        parent.keys.insert(index, middle_key)
        parent.children.insert(index + 1, sibling)
        sibling.parent = parent

        self._record(SplitStep(
            parent=parent.id, child=child.id, new_child=sibling.id, middle_key=middle_key,
        ))
        logger.debug("Split B-tree node %s around %s", child.id, middle_key)

    # Delete

    def delete(self, value: Any) -> bool:
        key = self._coerce_value(value, DeleteStep)
        if key is None:
            return False

        located = self._descend(key, DeleteStep)
        if located is None:
            return False
        node, index = located

        if node.is_leaf:
            node.keys.pop(index)
            self._record(DeleteStep(step='delete_leaf', value=key, node=node.id, position=index))
            leaf = node
        else:
            left = node.children[index]
            right = node.children[index + 1]
            if len(left.keys) >= len(right.keys):
                leaf = left
                while not leaf.is_leaf:
                    leaf = leaf.children[-1]
                replacement = leaf.keys.pop()
                step = 'replace_with_predecessor'
            else:
                leaf = right
                while not leaf.is_leaf:
                    leaf = leaf.children[0]
                replacement = leaf.keys.pop(0)
                step = 'replace_with_successor'
            node.keys[index] = replacement
            self._record(DeleteStep(
                step=step, value=key, node=node.id, replacement=replacement, position=index,
            ))

        self._repair_underflow(leaf)
        self.size -= 1
        self._update_depths(self.root)
        return True

    def _repair_underflow(self, node: BTreeNode) -> None:
        while node is not self.root and len(node.keys) < self.min_keys:
            parent = node.parent
            index = parent.children.index(node)
            left = parent.children[index - 1] if index > 0 else None
            right = parent.children[index + 1] if index + 1 < len(parent.children) else None

            if left is not None and len(left.keys) > self.min_keys:
                self._borrow_from_left(node, index)
                return
            if right is not None and len(right.keys) > self.min_keys:
                self._borrow_from_right(node, index)
                return

            if left is not None:
                self._merge(parent, index - 1)
            else:
                self._merge(parent, index)
            node = parent

        if not self.root.keys and not self.root.is_leaf:
            self.root = self.root.children[0]
            self.root.parent = None
            self._record(MergeStep(step='new_root', new_root=self.root.id))

    def _borrow_from_left(self, node: BTreeNode, index: int) -> None:
        parent = node.parent
        sibling = parent.children[index - 1]

        node.keys.insert(0, parent.keys[index - 1])
        parent.keys[index - 1] = sibling.keys.pop()
        if not node.is_leaf:
            moved = sibling.children.pop()
            node.children.insert(0, moved)
            moved.parent = node

        self._record(BorrowStep(
            step='borrow_left_complete', node=node.id, sibling=sibling.id,
            parent=parent.id, key=node.keys[0],
        ))
        logger.debug("B-tree node %s borrowed from left sibling %s", node.id, sibling.id)

    def _borrow_from_right(self, node: BTreeNode, index: int) -> None:
        parent = node.parent
        sibling = parent.children[index + 1]

        node.keys.append(parent.keys[index])
        parent.keys[index] = sibling.keys.pop(0)
        if not node.is_leaf:
            moved = sibling.children.pop(0)
            node.children.append(moved)
            moved.parent = node

        self._record(BorrowStep(
            step='borrow_right_complete', node=node.id, sibling=sibling.id,
            parent=parent.id, key=node.keys[-1],
        ))
        logger.debug("B-tree node %s borrowed from right sibling %s", node.id, sibling.id)

    def _merge(self, parent: BTreeNode, index: int) -> None:
        """Fold ``children[index + 1]`` and separator ``keys[index]`` into ``children[index]``."""
        left = parent.children[index]
        right = parent.children.pop(index + 1)
        separator = parent.keys.pop(index)

        left.keys.append(separator)
        left.keys.extend(right.keys)
        if not left.is_leaf:
            for child in right.children:
                child.parent = left
            left.children.extend(right.children)
        right.parent = None

        self._record(MergeStep(
            step='merge_complete', left_node=left.id, right_node=right.id,
            parent=parent.id, separator=separator,
        ))
        logger.debug("Merged B-tree nodes %s and %s around %s", left.id, right.id, separator)

    # Validation

    def check_b_tree_properties(self) -> List[Violation]:
        """Check key bounds, ordering, child counts, parent links and leaf depth."""
        violations: List[Violation] = []
        leaf_depths = set()

        def _check(node, low, high, depth, parent):
            if node.parent is not parent:
                violations.append(Violation('Parent link mismatch', node.id))

            count = len(node.keys)
            if count > self.max_keys:
                violations.append(Violation('Too many keys', node.id, f"{count} > {self.max_keys}"))
            if node is not self.root and count < self.min_keys:
                violations.append(Violation('Too few keys', node.id, f"{count} < {self.min_keys}"))
            if node is self.root and not node.is_leaf and count == 0:
                violations.append(Violation('Internal root has no keys', node.id))

            if any(a >= b for a, b in zip(node.keys, node.keys[1:])):
                violations.append(Violation('Keys not strictly increasing', node.id, str(node.keys)))
            if node.keys and ((low is not None and node.keys[0] <= low)
                              or (high is not None and node.keys[-1] >= high)):
                violations.append(Violation(
                    'Keys outside separator range', node.id, f"{node.keys} not in ({low}, {high})",
                ))

            if node.is_leaf:
                if node.children:
                    violations.append(Violation('Leaf has children', node.id))
                leaf_depths.add(depth)
                return

            if len(node.children) != count + 1:
                violations.append(Violation(
                    'Child count must be key count + 1', node.id,
                    f"{len(node.children)} children for {count} keys",
                ))
                return

            bounds = [low] + node.keys + [high]
            for i, child in enumerate(node.children):
                _check(child, bounds[i], bounds[i + 1], depth + 1, node)

        _check(self.root, None, None, 0, None)
        if len(leaf_depths) > 1:
            violations.append(Violation(
                'Leaves at different depths', self.root.id, f"depths {sorted(leaf_depths)}",
            ))
        return violations

    def is_valid_b_tree(self) -> bool:
        return not self.check_b_tree_properties()

    # Queries

    def _iter_nodes(self):
        queue = deque([self.root])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    def in_order_keys(self) -> List[Any]:
        keys: List[Any] = []

        def _walk(node):
            if node.is_leaf:
                keys.extend(node.keys)
                return
            for i, key in enumerate(node.keys):
                _walk(node.children[i])
                keys.append(key)
            _walk(node.children[-1])

        _walk(self.root)
        return keys

    def inorder_traversal(self) -> List[Any]:
        return self.in_order_keys()

    def preorder_traversal(self) -> List[Any]:
        """Keys node by node, each node before its children."""
        keys: List[Any] = []

        def _walk(node):
            keys.extend(node.keys)
            for child in node.children:
                _walk(child)

        _walk(self.root)
        return keys

    def postorder_traversal(self) -> List[Any]:
        """Keys node by node, each node after its children."""
        keys: List[Any] = []

        def _walk(node):
            for child in node.children:
                _walk(child)
            keys.extend(node.keys)

        _walk(self.root)
        return keys

    def level_order_traversal(self) -> List[Any]:
        return [key for node in self._iter_nodes() for key in node.keys]

    def find_node(self, value: Any) -> Optional[BTreeNode]:
        """Node holding ``value``, or None."""
        located = self._locate(value)
        return located[0] if located else None

    def find_min(self) -> Optional[Any]:
        """Smallest key (first key of the leftmost leaf)."""
        return self._min_value()

    def find_max(self) -> Optional[Any]:
        """Largest key (last key of the rightmost leaf)."""
        return self._max_value()

    def _min_value(self) -> Optional[Any]:
        node = self.root
        while not node.is_leaf:
            node = node.children[0]
        return node.keys[0] if node.keys else None

    def _max_value(self) -> Optional[Any]:
        node = self.root
        while not node.is_leaf:
            node = node.children[-1]
        return node.keys[-1] if node.keys else None

    def calculate_tree_height(self) -> int:
        """Edges from the root to any leaf; -1 for an empty tree."""
        if not self.size:
            return -1
        height = 0
        node = self.root
        while not node.is_leaf:
            node = node.children[0]
            height += 1
        return height

    def calculate_height(self) -> int:
        return self.calculate_tree_height()

    def _height(self) -> int:
        return self.calculate_tree_height()

    def _update_depths(self, node: BTreeNode, depth: int = 0) -> None:
        node.depth = depth
        for child in node.children:
            self._update_depths(child, depth + 1)

    def update_depths(self) -> None:
        self._update_depths(self.root)

    def is_balanced(self) -> bool:
        """All leaves at one depth."""
        depths = set()
        for node in self._iter_nodes():
            if node.is_leaf:
                depths.add(node.depth)
        return len(depths) <= 1

    def get_node_count(self) -> int:
        return sum(1 for _ in self._iter_nodes())

    def get_leaf_count(self) -> int:
        return sum(1 for node in self._iter_nodes() if node.is_leaf)

    def get_b_tree_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        stats.update({
            'order': self.order,
            'min_keys': self.min_keys,
            'max_keys': self.max_keys,
            'node_count': self.get_node_count(),
            'leaf_count': self.get_leaf_count(),
            'is_valid': self.is_valid_b_tree(),
        })
        return stats

    def _validation_info(self) -> Dict[str, Any]:
        return {
            'is_valid_b_tree': self.is_valid_b_tree(),
            'order': self.order,
            'height': self.calculate_tree_height(),
        }

    def get_tree_structure(self) -> Optional[Dict[str, Any]]:
        if not self.size:
            return None

        def _snapshot(node):
            return {
                'id': node.id,
                'keys': list(node.keys),
                'is_leaf': node.is_leaf,
                'depth': node.depth,
                'children': [_snapshot(child) for child in node.children],
            }

        return _snapshot(self.root)

    def generate_sample(self, values: Optional[List[Any]] = None) -> 'BTree':
        self.clear()
        for value in values or [10, 20, 5, 6, 12, 30, 7, 17]:
            self.insert(value)
        return self

    def clear(self) -> None:
        super().clear()
        self.root = self._new_btree_node(is_leaf=True)

    def __contains__(self, value: Any) -> bool:
        return self._locate(value) is not None
