"""AVL tree engine.

Insertion and deletion reuse the instrumented BST descent from
:mod:`treeexplorerlib.structures.bst`, then walk parent links back to the
root recomputing heights and rotating wherever ``|balance_factor| > 1``.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core import traversal
from ..core.base import BaseTree
from ..core.node import TreeNode
from ..core.oplog import (BalanceUpdateStep, DeleteStep, InsertStep, OperationType,
                          RotationStep, SearchStep)
from ..errors import Violation
from .bst import bst_violations, descend_insert, descend_search, locate, unlink_node

logger = logging.getLogger(__name__)


class AVLTree(BaseTree):
    """Height-balanced binary search tree.

    Every node keeps ``|height(left) - height(right)| <= 1``. Four
    rotation cases restore the bound after each structural change:

    ========  ==========  =========================
    case      rotation    trigger
    ========  ==========  =========================
    LL        right       bf > 1, bf(left) >= 0
    LR        left-right  bf > 1, bf(left) < 0
    RR        left        bf < -1, bf(right) <= 0
    RL        right-left  bf < -1, bf(right) > 0
    ========  ==========  =========================
    """

    tree_type = 'avl'
    duplicate_message = 'Duplicate values not allowed in AVL tree'

    def insert(self, value: Any) -> Optional[TreeNode]:
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
            self._rebalance(inserted)
            self._refresh()
        return inserted

    def delete(self, value: Any) -> bool:
        """Delete a value and rebalance from the parent of the removed node.

        When the target has two children its successor is the node that
        physically leaves the tree, so the upward walk starts below the
        target and passes through it.
        """
        key = self._coerce_value(value, DeleteStep)
        if key is None:
            return False

        target = descend_search(self, key, DeleteStep)
        if target is None:
            return False

        parent = unlink_node(self, target)
        self.size -= 1
        self._rebalance(parent)
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

    # Balancing

    def _update_node(self, node: TreeNode) -> None:
        node.calculate_height()
        node.calculate_balance_factor()
        self._record(BalanceUpdateStep(
            node=node.id, height=node.height, balance_factor=node.balance_factor,
        ))

    def _rebalance(self, node: Optional[TreeNode]) -> None:
        """Walk from ``node`` to the root, rotating unbalanced nodes."""
        while node:
            self._update_node(node)

            if node.balance_factor > 1:
                if node.left.calculate_balance_factor() >= 0:
                    self._record(RotationStep(
                        step='rotate', rotation='right', node=node.id, reason='Left-Left case',
                    ))
                    node = self._rotate_right(node)
                else:
                    self._record(RotationStep(
                        step='rotate', rotation='left-right', node=node.id, reason='Left-Right case',
                    ))
                    self._rotate_left(node.left)
                    node = self._rotate_right(node)
            elif node.balance_factor < -1:
                if node.right.calculate_balance_factor() <= 0:
                    self._record(RotationStep(
                        step='rotate', rotation='left', node=node.id, reason='Right-Right case',
                    ))
                    node = self._rotate_left(node)
                else:
                    self._record(RotationStep(
                        step='rotate', rotation='right-left', node=node.id, reason='Right-Left case',
                    ))
                    self._rotate_right(node.right)
                    node = self._rotate_left(node)

            node = node.parent

    def _replace_child(self, old: TreeNode, new: TreeNode) -> None:
        parent = old.parent
        if parent is None:
            self.root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new
        new.parent = parent

    def _rotate_right(self, y: TreeNode) -> TreeNode:
        """Lift ``y.left`` above ``y``; return the new subtree root."""
        x = y.left
        moved = x.right

        self._replace_child(y, x)
        x.right = y
        y.parent = x
        y.left = moved
        if moved:
            moved.parent = y

        self._update_node(y)
        self._update_node(x)
        self._record(RotationStep(step='complete', rotation='right', pivot=y.id, new_root=x.id))
        logger.debug("AVL right rotation at %s, new subtree root %s", y.value, x.value)
        return x

    def _rotate_left(self, x: TreeNode) -> TreeNode:
        """Lift ``x.right`` above ``x``; return the new subtree root."""
        y = x.right
        moved = y.left

        self._replace_child(x, y)
        y.left = x
        x.parent = y
        x.right = moved
        if moved:
            moved.parent = x

        self._update_node(x)
        self._update_node(y)
        self._record(RotationStep(step='complete', rotation='left', pivot=x.id, new_root=y.id))
        logger.debug("AVL left rotation at %s, new subtree root %s", x.value, y.value)
        return y

    # Queries

    def _min_value(self) -> Optional[Any]:
        node = traversal.leftmost(self.root)
        return node.value if node else None

    def _max_value(self) -> Optional[Any]:
        node = traversal.rightmost(self.root)
        return node.value if node else None

    def is_avl_balanced(self) -> bool:
        """Check the AVL bound from real subtree heights, ignoring cached fields."""
        def _height(node):
            if not node:
                return -1
            left = _height(node.left)
            right = _height(node.right)
            if left is None or right is None or abs(left - right) > 1:
                return None
            return max(left, right) + 1

        return _height(self.root) is not None

    def check_avl_properties(self) -> List[Violation]:
        violations = bst_violations(self.root)
        for node in traversal.iter_preorder(self.root):
            factor = traversal.max_depth(node.left) - traversal.max_depth(node.right)
            if abs(factor) > 1:
                violations.append(Violation('AVL balance', node.id, f"balance factor {factor}"))
        return violations

    def get_balance_factors(self) -> List[Dict[str, Any]]:
        self.calculate_height()
        return [
            {
                'value': node.value,
                'balance_factor': node.balance_factor,
                'height': node.height,
            }
            for node in traversal.iter_preorder(self.root)
        ]

    def get_unbalanced_nodes(self) -> List[Dict[str, Any]]:
        return [info for info in self.get_balance_factors() if abs(info['balance_factor']) > 1]

    def get_rotation_history(self) -> List[RotationStep]:
        return self.log.of_kind(OperationType.ROTATION)

    def get_avl_stats(self) -> Dict[str, Any]:
        """Base stats plus balance factor extremes and rotation count.

        An empty tree reports ``max_balance_factor`` 0 and
        ``avg_balance_factor`` 0.0.
        """
        stats = self.get_stats()
        factors = [info['balance_factor'] for info in self.get_balance_factors()]
        rotations = [r for r in self.get_rotation_history() if r.step == 'complete']
        stats.update({
            'is_avl_balanced': self.is_avl_balanced(),
            'rotation_count': len(rotations),
            'max_balance_factor': max((abs(f) for f in factors), default=0),
            'avg_balance_factor': sum(abs(f) for f in factors) / len(factors) if factors else 0.0,
        })
        return stats

    def _validation_info(self) -> Dict[str, Any]:
        return {
            'is_valid_bst': not bst_violations(self.root),
            'is_avl_balanced': self.is_avl_balanced(),
            'unbalanced_nodes': len(self.get_unbalanced_nodes()),
        }

    def generate_sample(self, values: Optional[List[Any]] = None) -> 'AVLTree':
        self.clear()
        for value in values or [10, 20, 30, 40, 50, 25]:
            self.insert(value)
        return self

    def __contains__(self, value: Any) -> bool:
        return locate(self.root, value) is not None
