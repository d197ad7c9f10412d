"""Tests for the shared traversal and bookkeeping helpers.

Trees here are wired by hand so the helpers are checked independently of
any engine's insertion logic.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from treeexplorerlib import NilNode, TreeNode
from treeexplorerlib.core import traversal


def link(parent, left=None, right=None):
    parent.left = left
    parent.right = right
    for child in (left, right):
        if child:
            child.parent = parent
    return parent


@pytest.fixture
def lopsided():
    """    4
          / \\
         2   5
        / \\
       1   3
      /
     0
    """
    nodes = {v: TreeNode(v, v + 1) for v in range(6)}
    link(nodes[1], nodes[0])
    link(nodes[2], nodes[1], nodes[3])
    return link(nodes[4], nodes[2], nodes[5])


def test_four_orders(lopsided):
    assert traversal.preorder(lopsided) == [4, 2, 1, 0, 3, 5]
    assert traversal.inorder(lopsided) == [0, 1, 2, 3, 4, 5]
    assert traversal.postorder(lopsided) == [0, 1, 3, 2, 5, 4]
    assert traversal.level_order(lopsided) == [4, 2, 5, 1, 3, 0]


def test_iterators_are_lazy(lopsided):
    nodes = traversal.iter_preorder(lopsided)
    assert next(nodes) is lopsided
    assert next(nodes).value == 2


def test_empty_tree():
    assert traversal.inorder(None) == []
    assert traversal.calculate_height(None) == -1
    assert traversal.snapshot(None) is None
    assert traversal.is_balanced(None)


@pytest.mark.parametrize("name, expected", [
    ('pre', [4, 2, 1, 0, 3, 5]),
    ('INORDER', [0, 1, 2, 3, 4, 5]),
    ('bfs', [4, 2, 5, 1, 3, 0]),
])
def test_lookup_by_name(lopsided, name, expected):
    assert traversal.get_traversal(name)(lopsided) == expected


def test_unknown_name():
    with pytest.raises(ValueError, match="Unknown traversal order"):
        traversal.get_traversal('spiral')


def test_heights_and_balance(lopsided):
    assert traversal.calculate_height(lopsided) == 3
    assert lopsided.balance_factor == 2
    assert lopsided.left.balance_factor == 1
    assert not traversal.is_balanced(lopsided)
    assert traversal.max_depth(lopsided) == 3


def test_depths(lopsided):
    traversal.update_depths(lopsided)
    depths = {n.value: n.depth for n in traversal.iter_level_order(lopsided)}
    assert depths == {4: 0, 2: 1, 5: 1, 1: 2, 3: 2, 0: 3}


def test_find_and_extremes(lopsided):
    assert traversal.find_node(lopsided, 3).parent.value == 2
    assert traversal.find_node(lopsided, 9) is None
    assert traversal.leftmost(lopsided).value == 0
    assert traversal.rightmost(lopsided).value == 5
    assert traversal.count_nodes(lopsided) == 6


def test_sentinel_children_count_as_absent():
    nil = NilNode()
    root = TreeNode(1, 1)
    root.left = nil
    root.right = nil
    assert root.is_leaf()
    assert traversal.preorder(root) == [1]
    assert traversal.calculate_height(root) == 0
    assert traversal.snapshot(root)['left'] is None


def test_snapshot_fields(lopsided):
    traversal.calculate_height(lopsided)
    traversal.update_depths(lopsided)
    snap = traversal.snapshot(lopsided)
    assert snap['id'] == 5
    assert snap['height'] == 3
    assert snap['left']['level'] == 1
    assert snap['left']['left']['left']['is_leaf'] is True
    assert snap['color'] == 'black'


def test_deep_left_chain():
    """5000 nodes hanging off left links, deeper than the interpreter's stack limit."""
    nodes = [TreeNode(v, v + 1) for v in range(5000)]
    for parent, child in zip(nodes[1:], nodes):
        link(parent, child)
    root = nodes[-1]

    assert traversal.inorder(root) == list(range(5000))
    assert traversal.postorder(root) == list(range(5000))
    assert traversal.preorder(root)[:2] == [4999, 4998]
    assert traversal.calculate_height(root) == 4999
    assert root.balance_factor == 4999
    assert traversal.max_depth(root) == 4999
    traversal.update_depths(root)
    assert nodes[0].depth == 4999
    assert not traversal.is_balanced(root)
    assert traversal.snapshot(root)['left']['value'] == 4998
