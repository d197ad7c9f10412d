"""BaseTree contract shared by every engine.

BaseTree is the single abstract interface all structures implement
directly. It owns the pieces every engine needs (root, size, operation
log, id counter, configuration) and exposes the shared capability set by
delegating to the free functions in :mod:`treeexplorerlib.core.traversal`.
Structure specific algorithms live in the concrete engines.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .. import catalog
from ..config import TreeConfig
from ..errors import InvalidTreeConfigError, coerce_numeric
from . import traversal
from .node import TreeNode
from .oplog import OperationLog, OperationRecord, UpdateStep

logger = logging.getLogger(__name__)


class BaseTree(ABC):
    """Abstract base for all tree engines.

    Subclasses must implement :meth:`insert`, :meth:`delete` and
    :meth:`search`. Engines whose storage is not a binary node graph
    (heap, B-tree, trie) override :meth:`_view_root` or the traversal
    accessors.
    """

    tree_type = 'base'

    def __init__(self, config: Optional[TreeConfig] = None):
        """Initialize an empty tree.

        Args:
            config: Engine configuration (defaults to TreeConfig())

        Raises:
            InvalidTreeConfigError: If the configuration does not validate
        """
        self.config = config or TreeConfig()
        errors = self.config.validate()
        if errors:
            raise InvalidTreeConfigError(f"Invalid configuration: {'; '.join(errors)}")

        self.type = self.tree_type
        self.root: Any = None
        self.size = 0
        self.log = OperationLog(
            step_mode=self.config.step_mode,
            step_policy=self.config.step_policy,
        )
        self._ids = itertools.count(1)

    # Abstract operations

    @abstractmethod
    def insert(self, value: Any) -> Any:
        """Insert a value; return the new node (or engine result) or None on failure."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement insert()")

    @abstractmethod
    def delete(self, value: Any) -> bool:
        """Delete a value; return True if it was found and removed."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement delete()")

    @abstractmethod
    def search(self, value: Any) -> Any:
        """Look a value up; return the match or the engine's not-found sentinel."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement search()")

    def update_value(self, old_value: Any, new_value: Any) -> bool:
        """Replace a value by deleting it and inserting the new one.

        Ordered engines cannot change a key in place without breaking their
        invariants, so the default is delete-then-insert. If the new value
        cannot be inserted (duplicate, invalid) the old value is restored.
        """
        if not self.delete(old_value):
            self._record(UpdateStep(step='not_found', old_value=old_value, new_value=new_value))
            return False

        if self.insert(new_value) is None:
            self.insert(old_value)
            self._record(UpdateStep(step='update_failed', old_value=old_value, new_value=new_value))
            return False

        self._record(UpdateStep(step='update_complete', old_value=old_value, new_value=new_value))
        return True

    # Internal helpers

    def _next_id(self) -> int:
        return next(self._ids)

    def _new_node(self, value: Any) -> TreeNode:
        return TreeNode(value, self._next_id())

    def _record(self, record: OperationRecord) -> OperationRecord:
        return self.log.append(record)

    def _coerce_value(self, value: Any, record_cls) -> Optional[Any]:
        """Validate a numeric key, logging an ``invalid_input`` step on failure.

        Args:
            value: Raw value from the caller
            record_cls: Step record class for the operation being attempted

        Returns:
            The numeric key, or None if the value was rejected
        """
        number = coerce_numeric(value, self.config.allow_numeric_strings)
        if number is None:
            logger.warning("%s rejected non-numeric value %r", self.type, value)
            self._record(record_cls(step='invalid_input', value=value))
        return number

    def _view_root(self) -> Optional[TreeNode]:
        """Root of the binary node graph the shared algorithms run over."""
        return self.root

    # Traversals

    def preorder_traversal(self) -> List[Any]:
        return traversal.preorder(self._view_root())

    def inorder_traversal(self) -> List[Any]:
        return traversal.inorder(self._view_root())

    def postorder_traversal(self) -> List[Any]:
        return traversal.postorder(self._view_root())

    def level_order_traversal(self) -> List[Any]:
        return traversal.level_order(self._view_root())

    def traverse(self, order: str) -> List[Any]:
        """Run a traversal by name (preorder, inorder, postorder, level_order).

        Raises:
            ValueError: If the order name is unknown
        """
        methods = {
            traversal.preorder: self.preorder_traversal,
            traversal.inorder: self.inorder_traversal,
            traversal.postorder: self.postorder_traversal,
            traversal.level_order: self.level_order_traversal,
        }
        return methods[traversal.get_traversal(order)]()

    # Shape bookkeeping

    def calculate_height(self) -> int:
        """Recompute every node's height and balance factor; return the root's."""
        return traversal.calculate_height(self._view_root())

    def update_depths(self) -> None:
        traversal.update_depths(self._view_root())

    def find_node(self, value: Any) -> Optional[TreeNode]:
        """First node equal to ``value`` in depth-first order, O(n)."""
        return traversal.find_node(self._view_root(), value)

    def find_min(self) -> Optional[TreeNode]:
        return traversal.leftmost(self._view_root())

    def find_max(self) -> Optional[TreeNode]:
        return traversal.rightmost(self._view_root())

    def is_balanced(self) -> bool:
        """Check the cached balance factors (call calculate_height() first for fresh data)."""
        return traversal.is_balanced(self._view_root())

    def _values(self) -> List[Any]:
        return self.level_order_traversal()

    def _min_value(self) -> Optional[Any]:
        values = self._values()
        return min(values) if values else None

    def _max_value(self) -> Optional[Any]:
        values = self._values()
        return max(values) if values else None

    def _height(self) -> int:
        root = self._view_root()
        return root.height if root else -1

    def get_stats(self) -> Dict[str, Any]:
        """Summarize the tree for display.

        Note: this is a side-effecting read. It recomputes the cached
        height, balance factor and depth of every node before reporting.

        Returns:
            Dict with size, height, type, is_balanced, min_value, max_value
        """
        self.calculate_height()
        self.update_depths()

        return {
            'size': self.size,
            'height': self._height(),
            'type': self.type,
            'is_balanced': self.is_balanced(),
            'min_value': self._min_value(),
            'max_value': self._max_value(),
        }

    def _validation_info(self) -> Dict[str, Any]:
        """Type specific validation flags reported by get_type_info()."""
        return {'is_balanced': self.is_balanced()}

    def get_type_info(self) -> Dict[str, Any]:
        """Catalog description of this tree type plus live validation flags."""
        info = catalog.get_info(self.type)
        info['validation'] = self._validation_info()
        return info

    def get_tree_structure(self) -> Optional[Dict[str, Any]]:
        """Serializable snapshot of the whole structure for a renderer."""
        return traversal.snapshot(self._view_root())

    # Lifecycle

    def clear(self) -> None:
        """Drop the whole node graph and reset the log and cursor."""
        self.root = None
        self.size = 0
        self.log.clear()
        logger.info("Cleared %s", self.type)

    def is_empty(self) -> bool:
        return self.size == 0

    # Step replay

    def set_step_mode(self, enabled: bool) -> None:
        self.log.set_step_mode(enabled)

    @property
    def is_step_mode(self) -> bool:
        return self.log.step_mode

    @property
    def current_step(self) -> int:
        return self.log.current_step

    @property
    def operation_history(self) -> Tuple[OperationRecord, ...]:
        return self.log.records

    def get_next_step(self) -> Optional[OperationRecord]:
        """Next record in the log, or None once the log is exhausted."""
        return self.log.next_step()

    def reset_steps(self) -> None:
        self.log.reset_steps()

    # Python protocols

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Any]:
        return iter(self.inorder_traversal())

    def __contains__(self, value: Any) -> bool:
        return self.find_node(value) is not None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type!r}, size={self.size})"
