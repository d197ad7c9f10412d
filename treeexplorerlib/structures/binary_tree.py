"""Generic binary tree filled in level order.

The same engine serves the binary-tree, full, perfect, complete and
balanced tags: the tag only changes which shape predicate the UI reports,
insertion is always breadth-first into the first open slot.
"""

from collections import deque
from typing import Any, Dict, List, Optional, Union

from ..config import TreeConfig, TreeType
from ..core import traversal
from ..core.base import BaseTree
from ..core.node import TreeNode
from ..core.oplog import DeleteStep, InsertStep, SearchStep, UpdateStep


class BinaryTree(BaseTree):
    """Binary tree without value ordering.

    Args:
        shape: One of the binary tree tags (see TreeType.binary_shapes())
        config: Engine configuration

    Raises:
        ValueError: If ``shape`` is not a binary tree tag
    """

    tree_type = TreeType.BINARY_TREE.value

    def __init__(self,
                 shape: Union[str, TreeType, None] = None,
                 config: Optional[TreeConfig] = None):
        super().__init__(config)
        if shape is not None:
            shapes = [s.value for s in TreeType.binary_shapes()]
            tag = shape.value if isinstance(shape, TreeType) else shape
            if tag not in shapes:
                raise ValueError(
                    f"Unknown binary tree shape: {shape}. "
                    f"Choose from: {', '.join(shapes)}"
                )
            self.type = tag

    def insert(self, value: Any) -> Optional[TreeNode]:
        """Place a value in the first open slot in level order."""
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

        queue = deque([self.root])
        while queue:
            current = queue.popleft()
            if not current.left:
                current.left = new_node
                step = 'insert_left'
            elif not current.right:
                current.right = new_node
                step = 'insert_right'
            else:
                queue.append(current.left)
                queue.append(current.right)
                continue

            new_node.parent = current
            self.size += 1
            self._record(InsertStep(step=step, value=key, node=new_node.id, parent=current.id))
            break

        self._refresh()
        return new_node

    def delete(self, value: Any) -> bool:
        """Remove a value, keeping the tree compact.

        The deepest, right-most node's value is copied into the target and
        that last node is removed instead.
        """
        key = self._coerce_value(value, DeleteStep)
        if key is None:
            return False

        target = traversal.find_node(self.root, key)
        if target is None:
            self._record(DeleteStep(step='not_found', value=key))
            return False

        last = None
        for last in traversal.iter_level_order(self.root):
            pass

        if last is self.root:
            self.root = None
            self._record(DeleteStep(step='delete_root', value=key, node=target.id))
        elif last is target:
            self._detach(last)
            self._record(DeleteStep(step='delete_leaf', value=key, node=target.id))
        else:
            target.value = last.value
            self._detach(last)
            self._record(DeleteStep(
                step='replace_and_delete', value=key, node=target.id,
                replacement=last.value,
            ))

        self.size -= 1
        self._refresh()
        return True

    @staticmethod
    def _detach(node: TreeNode) -> None:
        parent = node.parent
        if parent.left is node:
            parent.left = None
        else:
            parent.right = None
        node.parent = None

    def search(self, value: Any) -> Optional[TreeNode]:
        """Visit nodes pre-order until one holds ``value``."""
        key = self._coerce_value(value, SearchStep)
        if key is None:
            return None

        for node in traversal.iter_preorder(self.root):
            if node.value == key:
                self._record(SearchStep(step='found', value=key, node=node.id))
                self._record(SearchStep(step='search_complete', value=key, found=True))
                return node
            self._record(SearchStep(
                step='visit', value=key, current=node.id,
                comparison=f"{key} != {node.value}",
            ))

        self._record(SearchStep(step='search_complete', value=key, found=False))
        return None

    def update_value(self, old_value: Any, new_value: Any) -> bool:
        """Change a value in place; positions carry no meaning here."""
        old_key = self._coerce_value(old_value, UpdateStep)
        new_key = self._coerce_value(new_value, UpdateStep)
        if old_key is None or new_key is None:
            return False

        node = traversal.find_node(self.root, old_key)
        if node is None:
            self._record(UpdateStep(step='not_found', old_value=old_key, new_value=new_key))
            return False

        node.value = new_key
        self._record(UpdateStep(
            step='value_updated', old_value=old_key, new_value=new_key, node=node.id,
        ))
        return True

    def _refresh(self) -> None:
        traversal.calculate_height(self.root)
        traversal.update_depths(self.root)

    # Shape predicates

    def is_full_binary(self) -> bool:
        """Every node has zero or two children."""
        return all(bool(n.left) == bool(n.right)
                   for n in traversal.iter_preorder(self.root))

    def is_perfect_binary(self) -> bool:
        """Every internal node has two children and all leaves share one depth."""
        if not self.root:
            return True
        height = traversal.max_depth(self.root)
        return self.size == 2 ** (height + 1) - 1

    def is_complete_binary(self) -> bool:
        """Levels fill left to right with no gap before the last node."""
        if not self.root:
            return True

        queue = deque([self.root])
        seen_gap = False
        while queue:
            node = queue.popleft()
            for child in (node.left, node.right):
                if child:
                    if seen_gap:
                        return False
                    queue.append(child)
                else:
                    seen_gap = True
        return True

    def validate_type(self) -> bool:
        """Check the shape predicate matching this tree's tag."""
        checks = {
            TreeType.FULL_BINARY.value: self.is_full_binary,
            TreeType.PERFECT_BINARY.value: self.is_perfect_binary,
            TreeType.COMPLETE_BINARY.value: self.is_complete_binary,
            TreeType.BALANCED_BINARY.value: self.is_balanced,
        }
        check = checks.get(self.type)
        if check is None:
            return True
        self.calculate_height()
        return check()

    def get_max_depth(self) -> int:
        return traversal.max_depth(self.root)

    def get_leaf_count(self) -> int:
        return sum(1 for n in traversal.iter_preorder(self.root) if n.is_leaf())

    def get_internal_node_count(self) -> int:
        return sum(1 for n in traversal.iter_preorder(self.root) if not n.is_leaf())

    def _validation_info(self) -> Dict[str, Any]:
        self.calculate_height()
        return {
            'is_full': self.is_full_binary(),
            'is_perfect': self.is_perfect_binary(),
            'is_complete': self.is_complete_binary(),
            'is_balanced': self.is_balanced(),
        }

    def get_binary_tree_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        stats.update(self._validation_info())
        stats.update({
            'max_depth': self.get_max_depth(),
            'leaf_count': self.get_leaf_count(),
            'internal_node_count': self.get_internal_node_count(),
        })
        return stats

    def generate_sample(self, values: Optional[List[Any]] = None) -> 'BinaryTree':
        self.clear()
        for value in values or [1, 2, 3, 4, 5, 6, 7]:
            self.insert(value)
        return self


class FullBinaryTree(BinaryTree):
    tree_type = TreeType.FULL_BINARY.value

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(self.tree_type, config)


class PerfectBinaryTree(BinaryTree):
    tree_type = TreeType.PERFECT_BINARY.value

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(self.tree_type, config)


class CompleteBinaryTree(BinaryTree):
    tree_type = TreeType.COMPLETE_BINARY.value

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(self.tree_type, config)


class BalancedBinaryTree(BinaryTree):
    tree_type = TreeType.BALANCED_BINARY.value

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(self.tree_type, config)
