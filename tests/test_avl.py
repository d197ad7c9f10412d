"""Tests for the AVL tree engine."""

import math
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from treeexplorerlib import AVLTree, OperationType
from treeexplorerlib.testing import InvariantChecker


def build(values):
    tree = AVLTree()
    for value in values:
        tree.insert(value)
    return tree


def rotations(tree):
    return [r.rotation for r in tree.get_rotation_history() if r.step == 'rotate']


@pytest.mark.parametrize("values, expected_root, rotation, reason", [
    ([30, 20, 10], 20, 'right', 'Left-Left case'),
    ([10, 20, 30], 20, 'left', 'Right-Right case'),
    ([30, 10, 20], 20, 'left-right', 'Left-Right case'),
    ([10, 30, 20], 20, 'right-left', 'Right-Left case'),
])
def test_four_rotation_cases(values, expected_root, rotation, reason):
    tree = build(values)
    assert tree.root.value == expected_root
    assert tree.root.parent is None
    assert tree.preorder_traversal() == [20, 10, 30]

    announced = [r for r in tree.get_rotation_history() if r.step == 'rotate']
    assert len(announced) == 1
    assert announced[0].rotation == rotation
    assert announced[0].reason == reason
    InvariantChecker(tree).assert_valid()


def test_scenario_ascending_inserts():
    """Inserting 10..50 keeps the tree logarithmic and balanced."""
    print("\n=== Test: AVL ascending inserts ===")
    tree = build([10, 20, 30, 40, 50])
    stats = tree.get_stats()
    assert stats['height'] <= math.ceil(math.log2(6))
    assert all(-1 <= info['balance_factor'] <= 1 for info in tree.get_balance_factors())
    assert tree.preorder_traversal() == [20, 10, 40, 30, 50]
    print("[PASS] Height", stats['height'])


def test_sample_triggers_right_left():
    tree = AVLTree().generate_sample()
    assert tree.preorder_traversal() == [30, 20, 10, 25, 40, 50]
    assert rotations(tree) == ['left', 'left', 'right-left']
    assert tree.is_avl_balanced()


def test_balance_updates_logged():
    tree = build([10, 20])
    updates = tree.log.of_kind(OperationType.BALANCE_UPDATE)
    assert updates
    last = updates[-1]
    assert last.node == tree.root.id
    assert last.balance_factor == -1
    assert last.height == 1


def test_rotation_complete_records():
    tree = build([10, 20, 30])
    completed = [r for r in tree.get_rotation_history() if r.step == 'complete']
    assert len(completed) == 1
    assert completed[0].pivot == tree.find_node(10).id
    assert completed[0].new_root == tree.root.id


def test_delete_rebalances_from_removed_parent():
    tree = build([20, 10, 30, 5])
    assert tree.delete(30)
    assert tree.preorder_traversal() == [10, 5, 20]
    assert rotations(tree)[-1] == 'right'
    InvariantChecker(tree).assert_valid()


def test_delete_two_children_uses_successor():
    tree = build([20, 10, 30, 25, 40])
    assert tree.delete(20)
    assert tree.preorder_traversal() == [25, 10, 30, 40]
    assert tree.root.balance_factor == -1
    InvariantChecker(tree).assert_valid()


def test_delete_missing_and_invalid():
    tree = build([1, 2, 3])
    assert tree.delete(9) is False
    assert tree.delete('x') is False
    assert tree.size == 3


def test_duplicate_and_search():
    tree = build([5, 3, 8])
    assert tree.insert(3) is None
    assert tree.search(8).value == 8
    assert tree.search(4) is None
    assert tree.size == 3


def test_update_value_is_delete_then_insert():
    tree = build([10, 20, 30, 40, 50])
    assert tree.update_value(10, 60)
    assert tree.inorder_traversal() == [20, 30, 40, 50, 60]
    InvariantChecker(tree).assert_valid()


def test_empty_tree_stats():
    stats = AVLTree().get_avl_stats()
    assert stats['size'] == 0
    assert stats['height'] == -1
    assert stats['max_balance_factor'] == 0
    assert stats['avg_balance_factor'] == 0.0
    assert stats['rotation_count'] == 0


def test_stats_after_inserts():
    tree = build([10, 20, 30, 40, 50, 25])
    stats = tree.get_avl_stats()
    assert stats['is_avl_balanced'] is True
    assert stats['rotation_count'] == 4
    assert stats['max_balance_factor'] <= 1
    assert tree.get_unbalanced_nodes() == []
    assert tree.get_type_info()['validation']['is_avl_balanced'] is True


def test_long_sequence_stays_balanced():
    tree = AVLTree()
    checker = InvariantChecker(tree)
    for value in range(1, 101):
        tree.insert(value)
        checker.assert_valid()
    assert tree.get_stats()['height'] <= 1.44 * math.log2(102)
    for value in range(1, 101, 3):
        tree.delete(value)
        checker.assert_valid()
