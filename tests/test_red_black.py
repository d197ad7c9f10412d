"""Tests for the red-black tree engine and its nil sentinel."""

import random
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from treeexplorerlib import Color, NilNode, OperationType, RedBlackTree, SentinelMutationError
from treeexplorerlib.testing import InvariantChecker


def build(values):
    tree = RedBlackTree()
    for value in values:
        tree.insert(value)
    return tree


def fixup_steps(tree, phase):
    return [r.step for r in tree.log.of_kind(OperationType.FIXUP) if r.phase == phase]


class TestSentinel:
    """The nil sentinel is shared, falsy and immutable."""

    def test_sentinel_is_falsy_and_black(self):
        nil = NilNode()
        assert not nil
        assert nil.color is Color.BLACK
        assert nil.is_null_sentinel
        assert nil.is_leaf()

    def test_sentinel_rejects_writes(self):
        nil = NilNode()
        with pytest.raises(SentinelMutationError):
            nil.color = Color.RED
        with pytest.raises(SentinelMutationError):
            nil.parent = object()
        with pytest.raises(AttributeError):
            del nil.left

    def test_leaves_share_one_sentinel(self):
        tree = build([2, 1, 3])
        assert tree.find_node(1).left is tree.nil
        assert tree.find_node(3).right is tree.nil

    def test_sentinel_untouched_after_churn(self):
        tree = RedBlackTree()
        rng = random.Random(7)
        values = rng.sample(range(200), 60)
        for value in values:
            tree.insert(value)
        for value in values[::2]:
            tree.delete(value)
        assert tree.nil.parent is None
        assert tree.nil.color is Color.BLACK
        assert tree.nil.left is None and tree.nil.right is None


class TestInsert:

    def test_sample_shape_and_colors(self):
        tree = RedBlackTree().generate_sample()
        assert tree.preorder_traversal() == [38, 19, 12, 8, 31, 41]
        colors = {c['value']: c['color'] for c in tree.get_node_colors()}
        assert colors == {38: 'black', 19: 'red', 12: 'black', 8: 'red', 31: 'black', 41: 'black'}
        assert tree.get_black_height() == 2

    def test_sample_fixup_cases(self):
        tree = RedBlackTree().generate_sample()
        steps = fixup_steps(tree, 'insert')
        assert 'case1_recolor' in steps
        assert 'case2_left_rotate' in steps
        assert 'case3_right_rotate' in steps
        assert 'root_black' in steps

    def test_symmetric_rotation(self):
        tree = build([1, 2, 3])
        assert tree.preorder_traversal() == [2, 1, 3]
        assert tree.root.color is Color.BLACK
        assert tree.find_node(1).is_red and tree.find_node(3).is_red
        assert fixup_steps(tree, 'insert') == ['case3_left_rotate']

    def test_placement_records_color(self):
        tree = build([10])
        tree.insert(5)
        record = tree.operation_history[-1]
        assert record.step == 'insert_left'
        assert record.color == 'red'
        assert tree.operation_history[0].color == 'black'

    def test_root_always_black(self):
        tree = RedBlackTree()
        for value in range(20):
            tree.insert(value)
            assert tree.root.color is Color.BLACK

    def test_duplicate(self):
        tree = build([5, 3])
        assert tree.insert(5) is None
        assert tree.size == 2


class TestDelete:

    def test_delete_root_with_fixup(self):
        tree = RedBlackTree().generate_sample()
        assert tree.delete(38)
        assert tree.inorder_traversal() == [8, 12, 19, 31, 41]
        assert tree.root.value == 19
        steps = fixup_steps(tree, 'delete')
        assert steps[0] == 'case1_sibling_red_symmetric'
        InvariantChecker(tree).assert_valid()

    def test_delete_to_empty(self):
        tree = build([5, 3, 8, 1, 4])
        for value in [3, 5, 1, 8, 4]:
            assert tree.delete(value)
            InvariantChecker(tree).assert_valid()
        assert tree.root is None
        assert tree.size == 0
        assert tree.get_tree_structure() is None

    def test_delete_missing(self):
        tree = build([1, 2])
        assert tree.delete(7) is False
        assert tree.operation_history[-1].step == 'not_found'

    def test_update_value(self):
        tree = build([10, 20, 30])
        assert tree.update_value(20, 25)
        assert tree.inorder_traversal() == [10, 25, 30]
        assert tree.is_valid_red_black()


class TestValidation:

    def test_valid_tree_has_no_violations(self):
        assert RedBlackTree().generate_sample().check_red_black_properties() == []

    def test_red_root_detected(self):
        tree = build([1])
        tree.root.color = Color.RED
        properties = [v.property for v in tree.check_red_black_properties()]
        assert 'Root must be black' in properties

    def test_red_red_detected(self):
        tree = build([2, 1, 3, 0])
        tree.find_node(1).color = Color.RED
        properties = [v.property for v in tree.check_red_black_properties()]
        assert 'Red node cannot have red children' in properties

    def test_black_height_mismatch_detected(self):
        tree = build([2, 1, 3])
        tree.find_node(1).color = Color.BLACK
        properties = [v.property for v in tree.check_red_black_properties()]
        assert 'All paths must have same black height' in properties

    def test_stats(self):
        stats = RedBlackTree().generate_sample().get_red_black_stats()
        assert stats['size'] == 6
        assert stats['red_count'] == 2
        assert stats['black_count'] == 4
        assert stats['is_valid'] is True
        assert stats['violations'] == []

    def test_snapshot_hides_sentinel(self):
        tree = build([2, 1, 3])
        snapshot = tree.get_tree_structure()
        assert snapshot['color'] == 'black'
        assert snapshot['left']['is_red'] is True
        assert snapshot['left']['left'] is None


def test_random_operations_keep_invariants():
    rng = random.Random(2024)
    tree = RedBlackTree()
    checker = InvariantChecker(tree)
    present = set()
    for _ in range(300):
        value = rng.randrange(80)
        if value in present and rng.random() < 0.5:
            assert tree.delete(value)
            present.discard(value)
        elif value not in present:
            assert tree.insert(value) is not None
            present.add(value)
        checker.assert_valid()
    assert tree.inorder_traversal() == sorted(present)
