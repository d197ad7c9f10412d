"""Test fixtures for TreeExplorerLib consumers.

These helpers check a tree's structural invariants from the outside, so
test suites can assert validity after every mutation without knowing
which validator each engine exposes.
"""

from typing import Any, Dict, List

from ..core import traversal
from ..errors import Violation
from ..structures.avl import AVLTree
from ..structures.binary_tree import BinaryTree
from ..structures.bst import BinarySearchTree, bst_violations
from ..structures.btree import BTree
from ..structures.heap import Heap
from ..structures.red_black import RedBlackTree
from ..structures.trie import Trie


class InvariantChecker:
    """Public test fixture for invariant verification.

    Example:
        tree = AVLTree()
        checker = InvariantChecker(tree)
        for value in [10, 20, 30]:
            tree.insert(value)
            checker.assert_valid()
    """

    def __init__(self, tree):
        """Initialize with any engine built by this library.

        Args:
            tree: The engine to inspect
        """
        self._tree = tree

    def violations(self) -> List[Violation]:
        """Every invariant violation the engine currently has."""
        tree = self._tree

        if isinstance(tree, RedBlackTree):
            return bst_violations(tree.root) + tree.check_red_black_properties()
        if isinstance(tree, AVLTree):
            return tree.check_avl_properties()
        if isinstance(tree, BinarySearchTree):
            return tree.check_bst_properties()
        if isinstance(tree, Heap):
            return tree.check_heap_properties()
        if isinstance(tree, BTree):
            return tree.check_b_tree_properties()
        if isinstance(tree, Trie):
            return tree.check_trie_properties()
        if isinstance(tree, BinaryTree):
            return self._link_violations(tree.root)
        raise TypeError(f"No invariant checks for {type(tree).__name__}")

    @staticmethod
    def _link_violations(root) -> List[Violation]:
        violations = []
        for node in traversal.iter_preorder(root):
            for child in (node.left, node.right):
                if child and child.parent is not node:
                    violations.append(Violation('Parent link mismatch', child.id))
        return violations

    def size_matches(self) -> bool:
        """Whether the size counter agrees with the stored element count."""
        tree = self._tree
        if isinstance(tree, Heap):
            return tree.size == len(tree.heap)
        if isinstance(tree, (BTree, Trie)):
            return tree.size == len(tree.inorder_traversal())
        return tree.size == traversal.count_nodes(tree.root)

    def assert_valid(self) -> None:
        """Raise AssertionError listing every violation, if any."""
        problems = self.violations()
        if problems:
            details = '; '.join(
                f"{v.property} at {v.node}" + (f" ({v.detail})" if v.detail else '')
                for v in problems
            )
            raise AssertionError(f"{self._tree.type} invariants broken: {details}")
        if not self.size_matches():
            raise AssertionError(f"{self._tree.type} size counter out of sync")

    def get_summary(self) -> Dict[str, Any]:
        """High-level state for test assertions."""
        problems = self.violations()
        return {
            'type': self._tree.type,
            'size': self._tree.size,
            'is_valid': not problems,
            'violation_count': len(problems),
            'log_length': len(self._tree.log),
        }
