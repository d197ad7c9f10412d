"""Build tree engines from their type tags."""

import logging
from typing import Optional, Union

from .config import HeapKind, TreeConfig, TreeType
from .core.base import BaseTree
from .structures.avl import AVLTree
from .structures.binary_tree import BinaryTree
from .structures.bst import BinarySearchTree
from .structures.btree import BTree
from .structures.heap import Heap
from .structures.red_black import RedBlackTree
from .structures.trie import Trie

logger = logging.getLogger(__name__)


def create_tree(tree_type: Union[str, TreeType], config: Optional[TreeConfig] = None) -> BaseTree:
    """Create an empty engine by type tag.

    Args:
        tree_type: A TreeType or its tag (binary-tree, full-binary,
            perfect-binary, complete-binary, balanced-binary, bst, avl,
            red-black, min-heap, max-heap, b-tree, trie)
        config: Optional engine configuration

    Returns:
        Engine instance for the requested structure

    Raises:
        ValueError: If the tag is not recognized
        InvalidTreeConfigError: If the configuration does not validate
    """
    if isinstance(tree_type, TreeType):
        kind = tree_type
    else:
        try:
            kind = TreeType(str(tree_type).lower())
        except ValueError:
            raise ValueError(
                f"Unknown tree type: {tree_type}. "
                f"Choose from: {', '.join(t.value for t in TreeType)}"
            ) from None

    if kind in TreeType.binary_shapes():
        tree = BinaryTree(kind, config)
    elif kind is TreeType.BST:
        tree = BinarySearchTree(config)
    elif kind is TreeType.AVL:
        tree = AVLTree(config)
    elif kind is TreeType.RED_BLACK:
        tree = RedBlackTree(config)
    elif kind is TreeType.MIN_HEAP:
        tree = Heap(HeapKind.MIN, config)
    elif kind is TreeType.MAX_HEAP:
        tree = Heap(HeapKind.MAX, config)
    elif kind is TreeType.B_TREE:
        tree = BTree(config=config)
    else:
        tree = Trie(config)

    logger.info("Created %s engine", kind.value)
    return tree
