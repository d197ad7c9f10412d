"""Red-black tree engine.

Every leaf link points at one shared :class:`NilNode` per tree. The
sentinel is black, falsy and immutable: the rotation, transplant and fixup
code below never writes to it, so delete fixup carries the parent of the
replacement node in a local variable instead of on the sentinel.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config import TreeConfig
from ..core import traversal
from ..core.base import BaseTree
from ..core.node import Color, NilNode, TreeNode
from ..core.oplog import DeleteStep, FixupStep, InsertStep, RotationStep, SearchStep
from ..errors import Violation
from .bst import bst_violations, descend_insert, descend_search, find_extreme, locate

logger = logging.getLogger(__name__)


class RedBlackTree(BaseTree):
    """Binary search tree balanced by node coloring.

    Invariants kept after every operation:

    - the root is black
    - a red node has no red child
    - every root-to-nil path crosses the same number of black nodes
    """

    tree_type = 'red-black'
    duplicate_message = 'Duplicate values not allowed in Red-Black tree'

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(config)
        self.nil = NilNode()

    def _new_node(self, value: Any) -> TreeNode:
        node = TreeNode(value, self._next_id())
        node.color = Color.RED
        node.left = self.nil
        node.right = self.nil
        return node

    def insert(self, value: Any) -> Optional[TreeNode]:
        key = self._coerce_value(value, InsertStep)
        if key is None:
            return None

        new_node = self._new_node(key)
        if not self.root:
            new_node.color = Color.BLACK
            self.root = new_node
            self.size = 1
            self._record(InsertStep(
                step='create_root', value=key, node=new_node.id, color=Color.BLACK.value,
            ))
            self._refresh()
            return new_node

        inserted = descend_insert(self, new_node, self.duplicate_message, color=Color.RED.value)
        if inserted:
            self._insert_fixup(inserted)
            self._refresh()
        return inserted

    def delete(self, value: Any) -> bool:
        key = self._coerce_value(value, DeleteStep)
        if key is None:
            return False

        target = descend_search(self, key, DeleteStep)
        if target is None:
            return False

        self._delete_node(target)
        self.size -= 1
        if not self.root:
            self.root = None
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

    # Rotations

    def _left_rotate(self, x: TreeNode) -> None:
        y = x.right
        x.right = y.left
        if y.left:
            y.left.parent = x

        y.parent = x.parent
        if x.parent is None:
            self.root = y
        elif x is x.parent.left:
            x.parent.left = y
        else:
            x.parent.right = y

        y.left = x
        x.parent = y
        self._record(RotationStep(step='complete', rotation='left', pivot=x.id, new_root=y.id))
        logger.debug("Red-black left rotation at %s", x.value)

    def _right_rotate(self, y: TreeNode) -> None:
        x = y.left
        y.left = x.right
        if x.right:
            x.right.parent = y

        x.parent = y.parent
        if y.parent is None:
            self.root = x
        elif y is y.parent.right:
            y.parent.right = x
        else:
            y.parent.left = x

        x.right = y
        y.parent = x
        self._record(RotationStep(step='complete', rotation='right', pivot=y.id, new_root=x.id))
        logger.debug("Red-black right rotation at %s", y.value)

    # Insert repair

    def _insert_fixup(self, node: TreeNode) -> None:
        """Restore coloring after attaching a red node.

        Case 1: red uncle, recolor and move up two levels.
        Case 2: black uncle, node is an inner grandchild, rotate it outward.
        Case 3: black uncle, node is an outer grandchild, rotate the grandparent.
        """
        while node.parent and node.parent.is_red:
            parent = node.parent
            grandparent = parent.parent

            if parent is grandparent.left:
                uncle = grandparent.right
                if uncle.is_red:
                    self._record(FixupStep(
                        phase='insert', step='case1_recolor', node=node.id,
                        parent=parent.id, uncle=uncle.id, grandparent=grandparent.id,
                    ))
                    parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grandparent.color = Color.RED
                    node = grandparent
                    continue

                if node is parent.right:
                    self._record(FixupStep(
                        phase='insert', step='case2_left_rotate', node=node.id, parent=parent.id,
                    ))
                    node = parent
                    self._left_rotate(node)
                    parent = node.parent

                self._record(FixupStep(
                    phase='insert', step='case3_right_rotate', node=node.id,
                    parent=parent.id, grandparent=grandparent.id,
                ))
                parent.color = Color.BLACK
                grandparent.color = Color.RED
                self._right_rotate(grandparent)
            else:
                uncle = grandparent.left
                if uncle.is_red:
                    self._record(FixupStep(
                        phase='insert', step='case1_recolor_symmetric', node=node.id,
                        parent=parent.id, uncle=uncle.id, grandparent=grandparent.id,
                    ))
                    parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grandparent.color = Color.RED
                    node = grandparent
                    continue

                if node is parent.left:
                    self._record(FixupStep(
                        phase='insert', step='case2_right_rotate', node=node.id, parent=parent.id,
                    ))
                    node = parent
                    self._right_rotate(node)
                    parent = node.parent

                self._record(FixupStep(
                    phase='insert', step='case3_left_rotate', node=node.id,
                    parent=parent.id, grandparent=grandparent.id,
                ))
                parent.color = Color.BLACK
                grandparent.color = Color.RED
                self._left_rotate(grandparent)

        if self.root.is_red:
            self._record(FixupStep(phase='insert', step='root_black', node=self.root.id))
        self.root.color = Color.BLACK

    # Delete

    def _transplant(self, old: TreeNode, new: TreeNode) -> None:
        """Put ``new`` in ``old``'s slot; the sentinel never receives a parent."""
        if old.parent is None:
            self.root = new
        elif old is old.parent.left:
            old.parent.left = new
        else:
            old.parent.right = new
        if new:
            new.parent = old.parent

    def _delete_node(self, z: TreeNode) -> None:
        removed_color = z.color

        if not z.left:
            x, x_parent = z.right, z.parent
            self._transplant(z, z.right)
            self._record(DeleteStep(step='replace_right' if x else 'delete_leaf',
                                    value=z.value, node=z.id))
        elif not z.right:
            x, x_parent = z.left, z.parent
            self._transplant(z, z.left)
            self._record(DeleteStep(step='replace_left', value=z.value, node=z.id))
        else:
            y = find_extreme(self, z.right, 'min')
            self._record(DeleteStep(
                step='find_successor', value=z.value,
                successor=y.value, successor_node=y.id,
            ))
            removed_color = y.color
            x = y.right
            if y.parent is z:
                x_parent = y
            else:
                x_parent = y.parent
                self._transplant(y, y.right)
                y.right = z.right
                y.right.parent = y
            self._transplant(z, y)
            y.left = z.left
            y.left.parent = y
            y.color = z.color
            self._record(DeleteStep(step='delete_successor', value=z.value, node=y.id))

        z.parent = None
        z.left = z.right = self.nil

        if removed_color is Color.BLACK:
            self._delete_fixup(x, x_parent)

    def _delete_fixup(self, x: TreeNode, parent: Optional[TreeNode]) -> None:
        """Remove the extra black carried by ``x``.

        ``x`` may be the sentinel, so its parent is passed alongside.
        """
        while x is not self.root and not x.is_red:
            if x is parent.left:
                sibling = parent.right
                if sibling.is_red:
                    self._record(FixupStep(
                        phase='delete', step='case1_sibling_red', node=x.id,
                        parent=parent.id, sibling=sibling.id,
                    ))
                    sibling.color = Color.BLACK
                    parent.color = Color.RED
                    self._left_rotate(parent)
                    sibling = parent.right

                if not sibling.left.is_red and not sibling.right.is_red:
                    self._record(FixupStep(
                        phase='delete', step='case2_sibling_black_children', node=x.id,
                        parent=parent.id, sibling=sibling.id,
                    ))
                    sibling.color = Color.RED
                    x, parent = parent, parent.parent
                    continue

                if not sibling.right.is_red:
                    self._record(FixupStep(
                        phase='delete', step='case3_sibling_black_left_red', node=x.id,
                        parent=parent.id, sibling=sibling.id,
                    ))
                    sibling.left.color = Color.BLACK
                    sibling.color = Color.RED
                    self._right_rotate(sibling)
                    sibling = parent.right

                self._record(FixupStep(
                    phase='delete', step='case4_sibling_black_right_red', node=x.id,
                    parent=parent.id, sibling=sibling.id,
                ))
                sibling.color = parent.color
                parent.color = Color.BLACK
                sibling.right.color = Color.BLACK
                self._left_rotate(parent)
                x, parent = self.root, None
            else:
                sibling = parent.left
                if sibling.is_red:
                    self._record(FixupStep(
                        phase='delete', step='case1_sibling_red_symmetric', node=x.id,
                        parent=parent.id, sibling=sibling.id,
                    ))
                    sibling.color = Color.BLACK
                    parent.color = Color.RED
                    self._right_rotate(parent)
                    sibling = parent.left

                if not sibling.left.is_red and not sibling.right.is_red:
                    self._record(FixupStep(
                        phase='delete', step='case2_sibling_black_children_symmetric',
                        node=x.id, parent=parent.id, sibling=sibling.id,
                    ))
                    sibling.color = Color.RED
                    x, parent = parent, parent.parent
                    continue

                if not sibling.left.is_red:
                    self._record(FixupStep(
                        phase='delete', step='case3_sibling_black_right_red_symmetric',
                        node=x.id, parent=parent.id, sibling=sibling.id,
                    ))
                    sibling.right.color = Color.BLACK
                    sibling.color = Color.RED
                    self._left_rotate(sibling)
                    sibling = parent.left

                self._record(FixupStep(
                    phase='delete', step='case4_sibling_black_left_red_symmetric',
                    node=x.id, parent=parent.id, sibling=sibling.id,
                ))
                sibling.color = parent.color
                parent.color = Color.BLACK
                sibling.left.color = Color.BLACK
                self._right_rotate(parent)
                x, parent = self.root, None

        if x:
            x.color = Color.BLACK

    # Queries

    def _min_value(self) -> Optional[Any]:
        node = traversal.leftmost(self.root)
        return node.value if node else None

    def _max_value(self) -> Optional[Any]:
        node = traversal.rightmost(self.root)
        return node.value if node else None

    def check_red_black_properties(self) -> List[Violation]:
        """Check root color, red-red adjacency and black height.

        Returns:
            One Violation per broken rule (empty if the tree is valid)
        """
        violations: List[Violation] = []
        if not self.root:
            return violations

        if self.root.is_red:
            violations.append(Violation('Root must be black', self.root.id))

        for node in traversal.iter_preorder(self.root):
            if node.is_red and (node.left.is_red or node.right.is_red):
                violations.append(Violation('Red node cannot have red children', node.id))

        black_heights = set()

        def _walk(node, blacks):
            if not node:
                black_heights.add(blacks)
                return
            if not node.is_red:
                blacks += 1
            _walk(node.left, blacks)
            _walk(node.right, blacks)

        _walk(self.root, 0)
        if len(black_heights) > 1:
            violations.append(Violation(
                'All paths must have same black height', self.root.id,
                f"black heights {sorted(black_heights)}",
            ))
        return violations

    def is_valid_red_black(self) -> bool:
        return not self.check_red_black_properties() and not bst_violations(self.root)

    def get_black_height(self) -> int:
        """Black nodes on the left spine from the root, sentinel excluded."""
        height = 0
        node = self.root
        while node:
            if not node.is_red:
                height += 1
            node = node.left
        return height

    def get_node_colors(self) -> List[Dict[str, Any]]:
        return [
            {'value': node.value, 'color': node.color.value, 'id': node.id}
            for node in traversal.iter_preorder(self.root)
        ]

    def get_red_black_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        colors = self.get_node_colors()
        stats.update({
            'black_height': self.get_black_height(),
            'red_count': sum(1 for c in colors if c['color'] == Color.RED.value),
            'black_count': sum(1 for c in colors if c['color'] == Color.BLACK.value),
            'is_valid': self.is_valid_red_black(),
            'violations': [v.to_dict() for v in self.check_red_black_properties()],
        })
        return stats

    def _validation_info(self) -> Dict[str, Any]:
        return {
            'is_valid_bst': not bst_violations(self.root),
            'is_valid_red_black': self.is_valid_red_black(),
            'black_height': self.get_black_height(),
        }

    def generate_sample(self, values: Optional[List[Any]] = None) -> 'RedBlackTree':
        self.clear()
        for value in values or [41, 38, 31, 12, 19, 8]:
            self.insert(value)
        return self

    def __contains__(self, value: Any) -> bool:
        return locate(self.root, value) is not None
