"""TreeExplorerLib - Instrumented Tree Data Structures.

TreeExplorerLib implements the classic tree family (binary trees, BST,
AVL, red-black, heaps, B-trees and tries) with every mutation recording a
replayable log of the micro-steps it took, so a visualization can walk an
algorithm one decision at a time.

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from treeexplorerlib import create_tree

    tree = create_tree('avl')
    for value in [10, 20, 30]:
        tree.insert(value)

    tree.set_step_mode(True)
    while (step := tree.get_next_step()) is not None:
        print(step.to_dict())
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

# Configuration and errors
from .config import TreeType, HeapKind, StepModePolicy, TreeConfig
from .errors import (
    TreeExplorerError,
    InvalidTreeConfigError,
    SentinelMutationError,
    Violation,
    coerce_numeric,
)

# Core
from .core import (
    BaseTree,
    Color,
    TreeNode,
    NilNode,
    HeapNode,
    BTreeNode,
    TrieNode,
    OperationType,
    OperationRecord,
    OperationLog,
)

# Engines
from .structures import (
    BinaryTree,
    FullBinaryTree,
    PerfectBinaryTree,
    CompleteBinaryTree,
    BalancedBinaryTree,
    BinarySearchTree,
    AVLTree,
    RedBlackTree,
    Heap,
    MinHeap,
    MaxHeap,
    BTree,
    Trie,
)
from .factory import create_tree
from .catalog import TREE_INFO, get_info

__all__ = [
    "__version__",

    # Configuration
    "TreeType",
    "HeapKind",
    "StepModePolicy",
    "TreeConfig",

    # Errors
    "TreeExplorerError",
    "InvalidTreeConfigError",
    "SentinelMutationError",
    "Violation",
    "coerce_numeric",

    # Core
    "BaseTree",
    "Color",
    "TreeNode",
    "NilNode",
    "HeapNode",
    "BTreeNode",
    "TrieNode",
    "OperationType",
    "OperationRecord",
    "OperationLog",

    # Engines
    "BinaryTree",
    "FullBinaryTree",
    "PerfectBinaryTree",
    "CompleteBinaryTree",
    "BalancedBinaryTree",
    "BinarySearchTree",
    "AVLTree",
    "RedBlackTree",
    "Heap",
    "MinHeap",
    "MaxHeap",
    "BTree",
    "Trie",

    # Factory and catalog
    "create_tree",
    "TREE_INFO",
    "get_info",
]
