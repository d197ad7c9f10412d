"""Static descriptions of every tree type, keyed by type tag.

``get_type_info()`` on an engine merges one of these entries with live
validation flags for display.
"""

import copy
from typing import Any, Dict

TREE_INFO: Dict[str, Dict[str, Any]] = {
    'binary-tree': {
        'name': 'Binary Tree',
        'definition': 'A tree where each node has at most two children, '
                      'referred to as the left child and the right child.',
        'rules': [
            'Each node can have 0, 1, or 2 children',
            'Children are called left and right',
            'No value ordering requirements',
        ],
    },
    'full-binary': {
        'name': 'Full Binary Tree',
        'definition': 'A binary tree where every node has either 0 or 2 children.',
        'rules': [
            'Nodes can have 0 or 2 children only',
            'Cannot have nodes with 1 child',
        ],
    },
    'perfect-binary': {
        'name': 'Perfect Binary Tree',
        'definition': 'A binary tree where all interior nodes have two children '
                      'and all leaves are at the same depth.',
        'rules': [
            'All interior nodes have 2 children',
            'All leaves at the same level',
            'Total nodes = 2^(h+1) - 1',
        ],
    },
    'complete-binary': {
        'name': 'Complete Binary Tree',
        'definition': 'A binary tree where every level except possibly the last '
                      'is completely filled and all nodes are as far left as possible.',
        'rules': [
            'Fill levels left to right',
            'Last level can be incomplete',
        ],
    },
    'balanced-binary': {
        'name': 'Balanced Binary Tree',
        'definition': 'A binary tree where the heights of the two subtrees of any '
                      'node differ by at most one.',
        'rules': [
            'Balance factor in {-1, 0, 1}',
            'Maintain logarithmic height',
        ],
    },
    'bst': {
        'name': 'Binary Search Tree (BST)',
        'definition': 'A binary tree where every value in a left subtree is smaller '
                      'and every value in a right subtree is larger than the node.',
        'rules': [
            'Left subtree values < node value',
            'Right subtree values > node value',
            'No duplicate values',
            'In-order traversal is sorted',
        ],
    },
    'avl': {
        'name': 'AVL Tree',
        'definition': 'A self-balancing binary search tree where the heights of the '
                      'two subtrees of any node differ by at most one.',
        'rules': [
            'BST property maintained',
            'Balance factor in {-1, 0, 1}',
            'Rotations: Left, Right, Left-Right, Right-Left',
            'Rebalance after insert/delete',
        ],
    },
    'red-black': {
        'name': 'Red-Black Tree',
        'definition': 'A self-balancing binary search tree where each node is red '
                      'or black and coloring rules bound the height.',
        'rules': [
            'Root is always black',
            'Red nodes have black children',
            'Same black height to leaves',
            'New nodes are red',
        ],
    },
    'min-heap': {
        'name': 'Min Heap',
        'definition': 'A complete binary tree where every parent is smaller than '
                      'or equal to its children.',
        'rules': [
            'Parent value <= child values',
            'Minimum element at root',
            'Array representation',
        ],
    },
    'max-heap': {
        'name': 'Max Heap',
        'definition': 'A complete binary tree where every parent is greater than '
                      'or equal to its children.',
        'rules': [
            'Parent value >= child values',
            'Maximum element at root',
            'Array representation',
        ],
    },
    'b-tree': {
        'name': 'B-Tree',
        'definition': 'A self-balancing multi-way search tree that keeps sorted keys '
                      'in wide nodes, used by databases and file systems.',
        'rules': [
            'Non-root nodes hold between ceil(m/2)-1 and m-1 keys',
            'Internal nodes have one more child than keys',
            'All leaves at same level',
            'Split/merge operations',
        ],
    },
    'trie': {
        'name': 'Trie',
        'definition': 'A prefix tree storing a set of strings where each edge is '
                      'labelled with one character.',
        'rules': [
            'Each path represents a string prefix',
            'Shared prefixes share nodes',
            'End of word is marked',
        ],
    },
}


def get_info(tree_type: str) -> Dict[str, Any]:
    """Return a private copy of the catalog entry for ``tree_type``.

    Unknown tags fall back to the generic binary tree entry.
    """
    entry = TREE_INFO.get(tree_type, TREE_INFO['binary-tree'])
    return copy.deepcopy(entry)
