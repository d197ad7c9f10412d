"""Configuration system for TreeExplorerLib.

This module defines how callers choose a tree engine and tune its
behaviour: which structure to build, heap ordering, B-tree order and how
the step-replay cursor reacts to step mode being toggled.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class TreeType(Enum):
    """Tags for every structure the library can build.

    Values match the type tags reported by ``get_stats()['type']`` and
    accepted by :func:`treeexplorerlib.factory.create_tree`.
    """
    BINARY_TREE = "binary-tree"
    FULL_BINARY = "full-binary"
    PERFECT_BINARY = "perfect-binary"
    COMPLETE_BINARY = "complete-binary"
    BALANCED_BINARY = "balanced-binary"
    BST = "bst"
    AVL = "avl"
    RED_BLACK = "red-black"
    MIN_HEAP = "min-heap"
    MAX_HEAP = "max-heap"
    B_TREE = "b-tree"
    TRIE = "trie"

    @classmethod
    def binary_shapes(cls) -> List['TreeType']:
        """Tree types served by the generic level-order BinaryTree."""
        return [
            cls.BINARY_TREE,
            cls.FULL_BINARY,
            cls.PERFECT_BINARY,
            cls.COMPLETE_BINARY,
            cls.BALANCED_BINARY,
        ]


class HeapKind(Enum):
    """Ordering used by the heap engine."""
    MIN = "min"     # parent <= child
    MAX = "max"     # parent >= child


class StepModePolicy(Enum):
    """What happens to the replay cursor when step mode is switched on."""
    RESET_ON_ENABLE = "reset"   # Cursor goes back to the first record
    KEEP_POSITION = "keep"      # Cursor stays where it was


@dataclass
class TreeConfig:
    """Complete configuration for a tree engine.

    Every engine accepts an optional TreeConfig; fields that do not apply
    to a given structure are ignored by it.
    """

    # B-tree
    b_tree_order: int = 3

    # Heap
    heap_kind: HeapKind = HeapKind.MIN

    # Step replay
    step_mode: bool = False
    step_policy: StepModePolicy = StepModePolicy.RESET_ON_ENABLE

    # Input handling
    allow_numeric_strings: bool = True

    @classmethod
    def for_b_tree(cls, order: int = 3) -> 'TreeConfig':
        """Create config for a B-tree of the given order.

        Args:
            order: Maximum number of children per node

        Returns:
            TreeConfig for a B-tree
        """
        return cls(b_tree_order=order)

    @classmethod
    def for_heap(cls, kind: HeapKind = HeapKind.MIN) -> 'TreeConfig':
        """Create config for a heap of the given kind."""
        return cls(heap_kind=kind)

    @classmethod
    def stepping(cls, policy: StepModePolicy = StepModePolicy.RESET_ON_ENABLE) -> 'TreeConfig':
        """Create config with step mode enabled from construction."""
        return cls(step_mode=True, step_policy=policy)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.b_tree_order, int) or isinstance(self.b_tree_order, bool):
            errors.append("b_tree_order must be an integer")
        elif self.b_tree_order < 3:
            errors.append("b_tree_order must be at least 3")

        if not isinstance(self.heap_kind, HeapKind):
            errors.append("heap_kind must be a HeapKind")

        if not isinstance(self.step_policy, StepModePolicy):
            errors.append("step_policy must be a StepModePolicy")

        return errors
