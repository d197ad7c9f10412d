"""Unit tests for the heap engine.

Tests sift operations, bottom-up construction, index based edits and the
derived display tree for both heap kinds.
"""

import unittest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from treeexplorerlib import Heap, HeapKind, MaxHeap, MinHeap, OperationType, TreeConfig
from treeexplorerlib.core.oplog import ExtractStep, SwapStep
from treeexplorerlib.testing import InvariantChecker


class TestMinHeap(unittest.TestCase):
    """Min-heap ordering and operations."""

    def setUp(self):
        self.heap = MinHeap()
        for value in [10, 20, 15, 30, 40]:
            self.heap.insert(value)

    def test_array_layout(self):
        self.assertEqual(self.heap.heap, [10, 20, 15, 30, 40])
        self.assertEqual(self.heap.type, 'min-heap')
        self.assertEqual(self.heap.get_min(), 10)

    def test_extract_order(self):
        drained = [self.heap.extract_min() for _ in range(5)]
        self.assertEqual(drained, [10, 15, 20, 30, 40])
        self.assertTrue(self.heap.is_empty())

    def test_extract_empty(self):
        heap = MinHeap()
        self.assertIsNone(heap.extract())
        self.assertEqual(heap.operation_history[-1].step, 'empty_heap')

    def test_extract_logs_swap_and_replace(self):
        mark = self.heap.log.mark()
        self.heap.extract()
        records = self.heap.log.since(mark)
        self.assertIsInstance(records[0], SwapStep)
        self.assertEqual((records[0].index1, records[0].index2), (0, 4))
        replace = [r for r in records if isinstance(r, ExtractStep)][0]
        self.assertEqual(replace.step, 'replace_root')
        self.assertEqual(replace.value, 10)

    def test_insert_sifts_up(self):
        mark = self.heap.log.mark()
        self.heap.insert(5)
        self.assertEqual(self.heap.peek(), 5)
        records = self.heap.log.since(mark)
        self.assertEqual(records[0].step, 'add_to_end')
        self.assertEqual(records[0].index, 5)
        heapify = [r for r in records if r.kind is OperationType.HEAPIFY]
        self.assertTrue(all(r.direction == 'up' for r in heapify))
        self.assertEqual(len(heapify), 2)

    def test_search(self):
        self.assertEqual(self.heap.search(15), 2)
        self.assertEqual(self.heap.search(99), -1)
        self.assertEqual(self.heap.search('abc'), -1)

    def test_delete_at_index(self):
        self.assertTrue(self.heap.delete_at_index(1))
        self.assertEqual(self.heap.heap, [10, 30, 15, 40])
        self.assertTrue(self.heap.is_heap())
        self.assertFalse(self.heap.delete_at_index(10))
        self.assertFalse(self.heap.delete_at_index(-1))

    def test_delete_last_index(self):
        self.assertTrue(self.heap.delete_at_index(4))
        self.assertEqual(self.heap.heap, [10, 20, 15, 30])

    def test_update_at_index_moves_up(self):
        self.assertTrue(self.heap.update_at_index(4, 5))
        self.assertEqual(self.heap.heap, [5, 10, 15, 30, 20])

    def test_update_at_index_moves_down(self):
        self.assertTrue(self.heap.update_at_index(0, 50))
        self.assertEqual(self.heap.peek(), 15)
        InvariantChecker(self.heap).assert_valid()

    def test_delete_and_update_by_value(self):
        self.assertTrue(self.heap.delete(20))
        self.assertFalse(self.heap.delete(20))
        self.assertTrue(self.heap.update_value(40, 1))
        self.assertEqual(self.heap.peek(), 1)
        self.assertFalse(self.heap.update_value(999, 2))

    def test_stats(self):
        stats = self.heap.get_heap_stats()
        self.assertEqual(stats['size'], 5)
        self.assertEqual(stats['height'], 2)
        self.assertEqual(stats['root'], 10)
        self.assertEqual(stats['last_level_nodes'], 2)
        self.assertTrue(stats['is_heap'])
        self.assertEqual(stats['heap_array'], [10, 20, 15, 30, 40])
        self.assertEqual(stats['min_value'], 10)
        self.assertEqual(stats['max_value'], 40)

    def test_derived_tree(self):
        snapshot = self.heap.get_tree_structure()
        self.assertEqual(snapshot['id'], 'heap-0')
        self.assertEqual(snapshot['value'], 10)
        self.assertEqual(snapshot['left']['id'], 'heap-1')
        self.assertEqual(snapshot['left']['left']['value'], 30)
        self.assertIsNone(snapshot['right']['left'])

    def test_traversals(self):
        self.assertEqual(self.heap.level_order_traversal(), [10, 20, 15, 30, 40])
        self.assertEqual(self.heap.preorder_traversal(), [10, 20, 30, 40, 15])
        self.assertEqual(list(self.heap), [10, 20, 15, 30, 40])
        self.assertIn(30, self.heap)

    def test_clear(self):
        self.heap.clear()
        self.assertEqual(self.heap.heap, [])
        self.assertEqual(self.heap.size, 0)
        self.assertEqual(len(self.heap.operation_history), 0)


class TestBuildHeap(unittest.TestCase):
    """Bottom-up construction."""

    def test_scenario_build_then_extract(self):
        heap = MinHeap()
        self.assertTrue(heap.build_heap([10, 20, 15, 30, 40]))
        drained = [heap.extract() for _ in range(5)]
        self.assertEqual(drained, [10, 15, 20, 30, 40])

    def test_build_from_unsorted(self):
        heap = MinHeap()
        heap.build_heap([9, 4, 7, 1, 8, 2])
        self.assertEqual(heap.peek(), 1)
        self.assertTrue(heap.is_heap())
        build_steps = [r.step for r in heap.log.of_kind(OperationType.BUILD_HEAP)]
        self.assertEqual(build_steps, ['start', 'complete'])

    def test_build_rejects_invalid(self):
        heap = MinHeap()
        heap.insert(3)
        self.assertFalse(heap.build_heap([1, 'x', 2]))
        self.assertEqual(heap.heap, [3])

    def test_heap_sort(self):
        self.assertEqual(MinHeap().heap_sort([5, 3, 8, 1]), [1, 3, 5, 8])
        self.assertEqual(MaxHeap().heap_sort([5, 3, 8, 1]), [8, 5, 3, 1])


class TestMaxHeap(unittest.TestCase):
    """Max ordering through the shared engine."""

    def test_extract_descending(self):
        heap = MaxHeap()
        for value in [10, 20, 15, 30, 40]:
            heap.insert(value)
        self.assertEqual(heap.get_max(), 40)
        drained = [heap.extract_max() for _ in range(5)]
        self.assertEqual(drained, [40, 30, 20, 15, 10])

    def test_kind_from_config_and_string(self):
        self.assertIs(Heap(config=TreeConfig.for_heap(HeapKind.MAX)).kind, HeapKind.MAX)
        self.assertEqual(Heap('max-heap').type, 'max-heap')
        self.assertEqual(Heap('min').type, 'min-heap')
        self.assertEqual(Heap().type, 'min-heap')

    def test_violation_detected(self):
        heap = MaxHeap()
        heap.build_heap([5, 3, 4])
        heap.heap[2] = 9
        violations = heap.check_heap_properties()
        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0].node, 'heap-2')


if __name__ == '__main__':
    unittest.main()
