"""Binary search tree engine.

Besides :class:`BinarySearchTree` this module holds the instrumented BST
descent used by the AVL and red-black engines: each engine composes these
free functions with its own balancing instead of inheriting from the BST.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core import traversal
from ..core.base import BaseTree
from ..core.node import TreeNode
from ..core.oplog import DeleteStep, ExtremumStep, InsertStep, SearchStep
from ..errors import Violation

logger = logging.getLogger(__name__)


def descend_insert(tree: BaseTree,
                   new_node: TreeNode,
                   duplicate_message: str,
                   color: Optional[str] = None) -> Optional[TreeNode]:
    """Attach ``new_node`` below ``tree.root`` following BST ordering.

    Every comparison is logged with its literal text so the descent can be
    replayed. Equal values are rejected.

    Args:
        tree: Engine owning the root, size counter and log
        new_node: Detached node carrying the value to insert
        duplicate_message: Explanation logged when the value already exists
        color: Color reported in the placement record (red-black only)

    Returns:
        ``new_node`` once linked, or None for a duplicate
    """
    value = new_node.value
    current = tree.root

    while True:
        if value < current.value:
            comparison = f"{value} < {current.value}"
            if not current.left:
                current.left = new_node
                new_node.parent = current
                tree.size += 1
                tree._record(InsertStep(
                    step='insert_left', value=value, node=new_node.id,
                    parent=current.id, comparison=comparison, color=color,
                ))
                return new_node
            tree._record(InsertStep(
                step='traverse_left', value=value, current=current.id, comparison=comparison,
            ))
            current = current.left
        elif value > current.value:
            comparison = f"{value} > {current.value}"
            if not current.right:
                current.right = new_node
                new_node.parent = current
                tree.size += 1
                tree._record(InsertStep(
                    step='insert_right', value=value, node=new_node.id,
                    parent=current.id, comparison=comparison, color=color,
                ))
                return new_node
            tree._record(InsertStep(
                step='traverse_right', value=value, current=current.id, comparison=comparison,
            ))
            current = current.right
        else:
            tree._record(InsertStep(
                step='duplicate', value=value, current=current.id, message=duplicate_message,
            ))
            return None


def descend_search(tree: BaseTree, value: Any, record_cls=SearchStep) -> Optional[TreeNode]:
    """Find ``value`` by BST descent, logging each comparison.

    Args:
        tree: Engine to search
        value: Key to look for
        record_cls: SearchStep for lookups, DeleteStep when locating a delete target

    Returns:
        The matching node or None
    """
    node = tree.root
    while node:
        if value == node.value:
            tree._record(record_cls(step='found', value=value, node=node.id))
            return node
        if value < node.value:
            tree._record(record_cls(
                step='traverse_left', value=value, current=node.id,
                comparison=f"{value} < {node.value}",
            ))
            node = node.left
        else:
            tree._record(record_cls(
                step='traverse_right', value=value, current=node.id,
                comparison=f"{value} > {node.value}",
            ))
            node = node.right

    tree._record(record_cls(step='not_found', value=value))
    return None


def locate(root: Optional[TreeNode], value: Any) -> Optional[TreeNode]:
    """Silent BST lookup used for membership tests."""
    node = root
    while node:
        if value == node.value:
            return node
        node = node.left if value < node.value else node.right
    return None


def find_extreme(tree: BaseTree, node: Optional[TreeNode], direction: str) -> Optional[TreeNode]:
    """Descend all-left (``'min'``) or all-right (``'max'``), logging each hop."""
    if not node:
        return None

    tree._record(ExtremumStep(step='traverse', direction=direction, current=node.id))
    step = (lambda n: n.left) if direction == 'min' else (lambda n: n.right)
    while step(node):
        node = step(node)
        tree._record(ExtremumStep(step='traverse', direction=direction, current=node.id))

    tree._record(ExtremumStep(step='found', direction=direction, node=node.id, value=node.value))
    return node


def unlink_node(tree: BaseTree, node: TreeNode) -> Optional[TreeNode]:
    """Remove ``node`` from a plain (sentinel free) binary search tree.

    Leaf: removed outright. One child: child spliced into the parent slot.
    Two children: the in-order successor's value is copied into ``node``
    and the successor, which has no left child, is removed instead.

    Returns:
        Parent of the node that was physically removed (None if it was the root)
    """
    value = node.value

    if node.left and node.right:
        successor = find_extreme(tree, node.right, 'min')
        tree._record(DeleteStep(
            step='find_successor', value=value,
            successor=successor.value, successor_node=successor.id,
        ))
        node.value = successor.value
        node = successor
        removed_successor = True
    else:
        removed_successor = False

    child = node.left or node.right
    parent = node.parent

    if child:
        child.parent = parent
    if parent is None:
        tree.root = child
    elif parent.left is node:
        parent.left = child
    else:
        parent.right = child

    if not child:
        step = 'delete_leaf'
    elif child is node.left:
        step = 'replace_left'
    else:
        step = 'replace_right'
    tree._record(DeleteStep(step=step, value=value, node=node.id))

    if removed_successor:
        tree._record(DeleteStep(step='delete_successor', value=value, node=node.id))
        logger.debug("Replaced %s with its in-order successor", value)

    node.parent = node.left = node.right = None
    return parent


def bst_violations(root: Optional[TreeNode]) -> List[Violation]:
    """Check strict BST ordering and parent links over the whole tree."""
    violations: List[Violation] = []

    # (node, exclusive lower bound, exclusive upper bound, expected parent)
    stack = [(root, None, None, None)] if root else []
    while stack:
        node, low, high, parent = stack.pop()
        if node.parent is not parent:
            violations.append(Violation('Parent link mismatch', node.id))
        if (low is not None and node.value <= low) or (high is not None and node.value >= high):
            violations.append(Violation(
                'BST ordering', node.id,
                f"{node.value} outside ({low}, {high})",
            ))
        if node.right:
            stack.append((node.right, node.value, high, node))
        if node.left:
            stack.append((node.left, low, node.value, node))
    return violations


class BinarySearchTree(BaseTree):
    """Unbalanced binary search tree with instrumented operations.

    Smaller values go left, larger values right, duplicates are rejected.
    """

    tree_type = 'bst'
    duplicate_message = 'Duplicate values not allowed in BST'

    def insert(self, value: Any) -> Optional[TreeNode]:
        """Insert a value.

        Returns:
            The new node, or None for duplicate or non-numeric input
        """
        key = self._coerce_value(value, InsertStep)
        if key is None:
            return None

        new_node = self._new_node(key)
        if not self.root:
            self.root = new_node
            self.size = 1
            self._record(InsertStep(step='create_root', value=key, node=new_node.id))
            self._refresh()
            return new_node

        inserted = descend_insert(self, new_node, self.duplicate_message)
        if inserted:
            self._refresh()
        return inserted

    def delete(self, value: Any) -> bool:
        key = self._coerce_value(value, DeleteStep)
        if key is None:
            return False

        target = descend_search(self, key, DeleteStep)
        if target is None:
            return False

        unlink_node(self, target)
        self.size -= 1
        self._refresh()
        return True

    def search(self, value: Any) -> Optional[TreeNode]:
        key = self._coerce_value(value, SearchStep)
        if key is None:
            return None

        result = descend_search(self, key)
        self._record(SearchStep(step='search_complete', value=key, found=result is not None))
        return result

    def _refresh(self) -> None:
        traversal.calculate_height(self.root)
        traversal.update_depths(self.root)

    def find_min(self) -> Optional[TreeNode]:
        return find_extreme(self, self.root, 'min')

    def find_max(self) -> Optional[TreeNode]:
        return find_extreme(self, self.root, 'max')

    def _min_value(self) -> Optional[Any]:
        node = traversal.leftmost(self.root)
        return node.value if node else None

    def _max_value(self) -> Optional[Any]:
        node = traversal.rightmost(self.root)
        return node.value if node else None

    def find_successor(self, value: Any) -> Optional[TreeNode]:
        """Node holding the next larger value, or None."""
        node = locate(self.root, value)
        if node is None:
            return None
        if node.right:
            return find_extreme(self, node.right, 'min')

        current, parent = node, node.parent
        while parent and current is parent.right:
            current, parent = parent, parent.parent
        return parent

    def find_predecessor(self, value: Any) -> Optional[TreeNode]:
        """Node holding the next smaller value, or None."""
        node = locate(self.root, value)
        if node is None:
            return None
        if node.left:
            return find_extreme(self, node.left, 'max')

        current, parent = node, node.parent
        while parent and current is parent.left:
            current, parent = parent, parent.parent
        return parent

    def check_bst_properties(self) -> List[Violation]:
        return bst_violations(self.root)

    def is_valid_bst(self) -> bool:
        return not self.check_bst_properties()

    def get_sorted_values(self) -> List[Any]:
        return self.inorder_traversal()

    def get_range(self, low: Any, high: Any) -> List[Any]:
        """Values in ``[low, high]`` in ascending order, pruning subtrees."""
        result: List[Any] = []

        stack: List[TreeNode] = []
        node = self.root
        while stack or node:
            while node:
                stack.append(node)
                node = node.left if node.value > low else None
            node = stack.pop()
            if low <= node.value <= high:
                result.append(node.value)
            node = node.right if node.value < high else None
        return result

    def get_bst_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        stats.update({
            'is_valid': self.is_valid_bst(),
            'sorted_values': self.get_sorted_values(),
        })
        return stats

    def _validation_info(self) -> Dict[str, Any]:
        return {
            'is_valid_bst': self.is_valid_bst(),
            'is_balanced': self.is_balanced(),
            'min_value': self._min_value(),
            'max_value': self._max_value(),
        }

    def generate_balanced_bst(self, values: List[Any]) -> 'BinarySearchTree':
        """Rebuild the tree as a perfectly balanced BST over ``values``.

        Non-numeric values are dropped and duplicates collapsed.
        """
        self.clear()
        keys = []
        for value in values:
            key = self._coerce_value(value, InsertStep)
            if key is not None:
                keys.append(key)
        keys = sorted(set(keys))

        def _build(start, end):
            if start > end:
                return None
            mid = (start + end) // 2
            node = self._new_node(keys[mid])
            node.left = _build(start, mid - 1)
            node.right = _build(mid + 1, end)
            if node.left:
                node.left.parent = node
            if node.right:
                node.right.parent = node
            return node

        self.root = _build(0, len(keys) - 1)
        self.size = len(keys)
        self._refresh()
        logger.debug("Rebuilt balanced BST over %d keys", self.size)
        return self

    def generate_sample(self, values: Optional[List[Any]] = None) -> 'BinarySearchTree':
        self.clear()
        for value in values or [50, 30, 70, 20, 40, 60, 80, 10, 25, 35, 45]:
            self.insert(value)
        return self

    def __contains__(self, value: Any) -> bool:
        return locate(self.root, value) is not None
