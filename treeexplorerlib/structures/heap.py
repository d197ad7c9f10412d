"""Binary heap engine backed by a flat list.

For index ``i`` the parent is ``(i - 1) // 2`` and the children are
``2i + 1`` and ``2i + 2``. A tree of :class:`HeapNode` objects is derived
from the list only when a renderer or a shared traversal needs one.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Union

from ..config import HeapKind, TreeConfig
from ..core import traversal
from ..core.base import BaseTree
from ..core.node import HeapNode
from ..core.oplog import (BuildHeapStep, DeleteStep, ExtractStep, HeapifyStep, InsertStep,
                          SearchStep, SwapStep, UpdateStep)
from ..errors import Violation

logger = logging.getLogger(__name__)


class Heap(BaseTree):
    """Min- or max-heap with instrumented sift operations.

    Args:
        kind: HeapKind, or one of ``'min'``/``'max'``/``'min-heap'``/``'max-heap'``;
            defaults to ``config.heap_kind``
        config: Engine configuration
    """

    tree_type = 'min-heap'

    def __init__(self,
                 kind: Union[HeapKind, str, None] = None,
                 config: Optional[TreeConfig] = None):
        super().__init__(config)
        if kind is None:
            kind = self.config.heap_kind
        elif isinstance(kind, str):
            kind = HeapKind(kind[:-len('-heap')] if kind.endswith('-heap') else kind)
        self.kind = kind
        self.type = f"{kind.value}-heap"
        self.heap: List[Any] = []

    @staticmethod
    def parent_index(index: int) -> int:
        return (index - 1) // 2

    @staticmethod
    def left_child_index(index: int) -> int:
        return 2 * index + 1

    @staticmethod
    def right_child_index(index: int) -> int:
        return 2 * index + 2

    def _outranks(self, a: Any, b: Any) -> bool:
        """Whether ``a`` belongs above ``b`` under this heap's ordering."""
        if self.kind is HeapKind.MIN:
            return a < b
        return a > b

    def _swap(self, i: int, j: int) -> None:
        self.heap[i], self.heap[j] = self.heap[j], self.heap[i]
        self._record(SwapStep(index1=i, index2=j, value1=self.heap[i], value2=self.heap[j]))

    def _heapify_up(self, index: int) -> None:
        while index > 0:
            parent = self.parent_index(index)
            if not self._outranks(self.heap[index], self.heap[parent]):
                break
            self._record(HeapifyStep(
                direction='up', index=index, other_index=parent,
                value=self.heap[index], other_value=self.heap[parent],
            ))
            self._swap(index, parent)
            index = parent

    def _heapify_down(self, index: int) -> None:
        while True:
            left = self.left_child_index(index)
            right = self.right_child_index(index)
            favored = index

            if left < self.size and self._outranks(self.heap[left], self.heap[favored]):
                favored = left
            if right < self.size and self._outranks(self.heap[right], self.heap[favored]):
                favored = right
            if favored == index:
                break

            self._record(HeapifyStep(
                direction='down', index=index, other_index=favored,
                value=self.heap[index], other_value=self.heap[favored],
            ))
            self._swap(index, favored)
            index = favored

    def _sift(self, index: int) -> None:
        """Move the element at ``index`` whichever way restores the ordering."""
        if index > 0 and self._outranks(self.heap[index], self.heap[self.parent_index(index)]):
            self._heapify_up(index)
        else:
            self._heapify_down(index)

    # Core operations

    def insert(self, value: Any) -> Optional[Any]:
        """Append a value and sift it up.

        Returns:
            The inserted key, or None for non-numeric input
        """
        key = self._coerce_value(value, InsertStep)
        if key is None:
            return None

        self.heap.append(key)
        self.size += 1
        self._record(InsertStep(step='add_to_end', value=key, index=self.size - 1))
        self._heapify_up(self.size - 1)
        return key

    def extract(self) -> Optional[Any]:
        """Remove and return the root, or None if the heap is empty."""
        if not self.heap:
            self._record(ExtractStep(step='empty_heap'))
            return None

        root = self.heap[0]
        if self.size == 1:
            self.heap.pop()
            self.size = 0
            self._record(ExtractStep(step='extract_root', value=root))
            return root

        self._swap(0, self.size - 1)
        self.heap.pop()
        self.size -= 1
        self._record(ExtractStep(step='replace_root', value=root, new_root=self.heap[0]))
        self._heapify_down(0)
        return root

    def peek(self) -> Optional[Any]:
        return self.heap[0] if self.heap else None

    def build_heap(self, values: List[Any]) -> bool:
        """Replace the contents with ``values`` and heapify bottom-up in O(n).

        Returns:
            False (leaving the heap untouched) if any value is non-numeric
        """
        keys = [self._coerce_value(v, InsertStep) for v in values]
        if any(k is None for k in keys):
            return False

        self.heap = keys
        self.size = len(keys)
        self._record(BuildHeapStep(step='start', values=tuple(keys)))
        for index in range(self.size // 2 - 1, -1, -1):
            self._heapify_down(index)
        self._record(BuildHeapStep(step='complete', values=tuple(self.heap)))
        logger.debug("Built %s from %d values", self.type, self.size)
        return True

    def delete_at_index(self, index: int) -> bool:
        """Remove the element at ``index``, filling the hole with the last element."""
        if index < 0 or index >= self.size:
            self._record(DeleteStep(step='invalid_index', index=index))
            return False

        value = self.heap[index]
        last = self.heap.pop()
        self.size -= 1
        if index < self.size:
            self.heap[index] = last
            self._record(DeleteStep(step='replace_with_last', value=value,
                                    replacement=last, index=index))
            self._sift(index)
        else:
            self._record(DeleteStep(step='delete_last', value=value, index=index))
        return True

    def update_at_index(self, index: int, new_value: Any) -> bool:
        key = self._coerce_value(new_value, UpdateStep)
        if key is None:
            return False
        if index < 0 or index >= self.size:
            self._record(UpdateStep(step='invalid_index', new_value=key, index=index))
            return False

        old = self.heap[index]
        self.heap[index] = key
        self._record(UpdateStep(step='value_updated', old_value=old, new_value=key, index=index))
        self._sift(index)
        return True

    def _index_of(self, value: Any) -> int:
        for index, item in enumerate(self.heap):
            if item == value:
                return index
        return -1

    def search(self, value: Any) -> int:
        """Linear scan for ``value``.

        Returns:
            Index of the first match, or -1
        """
        key = self._coerce_value(value, SearchStep)
        if key is None:
            return -1

        index = self._index_of(key)
        if index == -1:
            self._record(SearchStep(step='not_found', value=key, found=False))
        else:
            self._record(SearchStep(step='found', value=key, index=index, found=True))
        return index

    def delete(self, value: Any) -> bool:
        key = self._coerce_value(value, DeleteStep)
        if key is None:
            return False

        index = self._index_of(key)
        if index == -1:
            self._record(DeleteStep(step='not_found', value=key))
            return False
        return self.delete_at_index(index)

    def update_value(self, old_value: Any, new_value: Any) -> bool:
        old_key = self._coerce_value(old_value, UpdateStep)
        if old_key is None:
            return False

        index = self._index_of(old_key)
        if index == -1:
            self._record(UpdateStep(step='not_found', old_value=old_key, new_value=new_value))
            return False
        return self.update_at_index(index, new_value)

    # Validation

    def check_heap_properties(self) -> List[Violation]:
        violations = []
        for index in range(1, self.size):
            parent = self.parent_index(index)
            if self._outranks(self.heap[index], self.heap[parent]):
                violations.append(Violation(
                    'Heap ordering', f"heap-{index}",
                    f"{self.heap[index]} at {index} outranks parent {self.heap[parent]} at {parent}",
                ))
        return violations

    def is_heap(self) -> bool:
        return not self.check_heap_properties()

    def heap_sort(self, values: Optional[List[Any]] = None) -> List[Any]:
        """Drain the heap in root order (ascending for min, descending for max).

        Args:
            values: Optional values to build the heap from first

        Returns:
            The drained values; the heap is left empty
        """
        if values is not None and not self.build_heap(values):
            return []
        result = []
        while self.heap:
            result.append(self.extract())
        return result

    # Derived tree view

    def _build_view(self, index: int = 0) -> Optional[HeapNode]:
        if index >= self.size:
            return None
        node = HeapNode(self.heap[index], index)
        node.left = self._build_view(self.left_child_index(index))
        node.right = self._build_view(self.right_child_index(index))
        if node.left:
            node.left.parent = node
        if node.right:
            node.right.parent = node
        return node

    def _view_root(self) -> Optional[HeapNode]:
        root = self._build_view()
        traversal.calculate_height(root)
        traversal.update_depths(root)
        return root

    def level_order_traversal(self) -> List[Any]:
        return list(self.heap)

    def find_min(self) -> Optional[Any]:
        """Smallest stored value (the root of a min-heap)."""
        return self._min_value()

    def find_max(self) -> Optional[Any]:
        """Largest stored value (the root of a max-heap)."""
        return self._max_value()

    def _height(self) -> int:
        return int(math.log2(self.size)) if self.size else -1

    def get_last_level_node_count(self) -> int:
        if not self.size:
            return 0
        return self.size - (2 ** self._height() - 1)

    def get_heap_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        stats.update({
            'root': self.peek(),
            'is_heap': self.is_heap(),
            'last_level_nodes': self.get_last_level_node_count(),
            'heap_array': list(self.heap),
        })
        return stats

    def _validation_info(self) -> Dict[str, Any]:
        return {'is_heap': self.is_heap(), 'is_balanced': True}

    def generate_sample(self, values: Optional[List[Any]] = None) -> 'Heap':
        self.clear()
        for value in values or [10, 20, 15, 30, 40]:
            self.insert(value)
        return self

    def clear(self) -> None:
        super().clear()
        self.heap = []

    def __iter__(self):
        return iter(list(self.heap))

    def __contains__(self, value: Any) -> bool:
        return self._index_of(value) != -1


class MinHeap(Heap):
    tree_type = 'min-heap'

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(HeapKind.MIN, config)

    def extract_min(self) -> Optional[Any]:
        return self.extract()

    def get_min(self) -> Optional[Any]:
        return self.peek()


class MaxHeap(Heap):
    tree_type = 'max-heap'

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(HeapKind.MAX, config)

    def extract_max(self) -> Optional[Any]:
        return self.extract()

    def get_max(self) -> Optional[Any]:
        return self.peek()
