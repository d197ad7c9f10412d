"""Concrete tree engines."""

from .binary_tree import (
    BinaryTree,
    FullBinaryTree,
    PerfectBinaryTree,
    CompleteBinaryTree,
    BalancedBinaryTree,
)
from .bst import BinarySearchTree
from .avl import AVLTree
from .red_black import RedBlackTree
from .heap import Heap, MinHeap, MaxHeap
from .btree import BTree
from .trie import Trie

__all__ = [
    'BinaryTree',
    'FullBinaryTree',
    'PerfectBinaryTree',
    'CompleteBinaryTree',
    'BalancedBinaryTree',
    'BinarySearchTree',
    'AVLTree',
    'RedBlackTree',
    'Heap',
    'MinHeap',
    'MaxHeap',
    'BTree',
    'Trie',
]
