"""Operation log and step replay for TreeExplorerLib.

Every engine owns one :class:`OperationLog`. Mutations and queries append
immutable step records describing each decision they take (comparison
made, node created, rotation performed, keys moved). A visualization
replays the log one record at a time through the log's cursor.

Records form a closed set: one frozen dataclass per :class:`OperationType`.
Consumers can dispatch on ``record.kind`` or on the record class.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple

from ..config import StepModePolicy


class OperationType(Enum):
    """Kinds of step records an engine can emit."""
    INSERT = "insert"
    DELETE = "delete"
    SEARCH = "search"
    EXTREMUM = "extremum"
    UPDATE = "update"
    BALANCE_UPDATE = "balance_update"
    ROTATION = "rotation"
    FIXUP = "fixup"
    SWAP = "swap"
    HEAPIFY = "heapify"
    EXTRACT = "extract"
    BUILD_HEAP = "build_heap"
    SPLIT = "split"
    MERGE = "merge"
    BORROW = "borrow"
    QUERY = "query"


class OperationRecord:
    """Base of every step record.

    Subclasses are frozen dataclasses and declare their ``kind``.
    """

    kind: ClassVar[OperationType]

    @property
    def type(self) -> str:
        return self.kind.value

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the record, omitting unset fields."""
        data: Dict[str, Any] = {'type': self.kind.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data


@dataclass(frozen=True)
class InsertStep(OperationRecord):
    """One step of an insertion (descent, placement, rejection)."""
    kind: ClassVar[OperationType] = OperationType.INSERT

    step: str
    value: Any = None
    node: Any = None
    parent: Any = None
    current: Any = None
    comparison: Optional[str] = None
    color: Optional[str] = None
    index: Optional[int] = None
    position: Optional[int] = None
    child_index: Optional[int] = None
    char: Optional[str] = None
    path: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class DeleteStep(OperationRecord):
    """One step of a deletion."""
    kind: ClassVar[OperationType] = OperationType.DELETE

    step: str
    value: Any = None
    node: Any = None
    current: Any = None
    comparison: Optional[str] = None
    successor: Any = None
    successor_node: Any = None
    replacement: Any = None
    index: Optional[int] = None
    position: Optional[int] = None
    child_index: Optional[int] = None
    char: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class SearchStep(OperationRecord):
    """One step of a lookup."""
    kind: ClassVar[OperationType] = OperationType.SEARCH

    step: str
    value: Any = None
    node: Any = None
    current: Any = None
    comparison: Optional[str] = None
    found: Optional[bool] = None
    index: Optional[int] = None
    position: Optional[int] = None
    child_index: Optional[int] = None
    char: Optional[str] = None
    path: Optional[str] = None


@dataclass(frozen=True)
class ExtremumStep(OperationRecord):
    """Descent toward the minimum (``direction='min'``) or maximum."""
    kind: ClassVar[OperationType] = OperationType.EXTREMUM

    step: str
    direction: str
    current: Any = None
    node: Any = None
    value: Any = None


@dataclass(frozen=True)
class UpdateStep(OperationRecord):
    """Replacement of one value by another."""
    kind: ClassVar[OperationType] = OperationType.UPDATE

    step: str
    old_value: Any = None
    new_value: Any = None
    value: Any = None
    node: Any = None
    index: Optional[int] = None


@dataclass(frozen=True)
class BalanceUpdateStep(OperationRecord):
    """Recomputed height and balance factor of one AVL node."""
    kind: ClassVar[OperationType] = OperationType.BALANCE_UPDATE

    node: Any
    height: int
    balance_factor: int
    step: str = "balance_update"


@dataclass(frozen=True)
class RotationStep(OperationRecord):
    """Rotation announcement (``step='rotate'``) or completion (``'complete'``)."""
    kind: ClassVar[OperationType] = OperationType.ROTATION

    step: str
    rotation: str
    node: Any = None
    pivot: Any = None
    new_root: Any = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class FixupStep(OperationRecord):
    """Red-black repair case applied after an insert or delete."""
    kind: ClassVar[OperationType] = OperationType.FIXUP

    phase: str
    step: str
    node: Any = None
    parent: Any = None
    uncle: Any = None
    grandparent: Any = None
    sibling: Any = None


@dataclass(frozen=True)
class SwapStep(OperationRecord):
    """Exchange of two heap slots; values are reported after the swap."""
    kind: ClassVar[OperationType] = OperationType.SWAP

    index1: int
    index2: int
    value1: Any
    value2: Any
    step: str = "swap"


@dataclass(frozen=True)
class HeapifyStep(OperationRecord):
    """Decision to move an element ``direction='up'`` or ``'down'``."""
    kind: ClassVar[OperationType] = OperationType.HEAPIFY

    direction: str
    index: int
    other_index: int
    value: Any
    other_value: Any
    step: str = "compare"


@dataclass(frozen=True)
class ExtractStep(OperationRecord):
    """Removal of the heap root."""
    kind: ClassVar[OperationType] = OperationType.EXTRACT

    step: str
    value: Any = None
    new_root: Any = None


@dataclass(frozen=True)
class BuildHeapStep(OperationRecord):
    """Start or end of a bottom-up heap construction."""
    kind: ClassVar[OperationType] = OperationType.BUILD_HEAP

    step: str
    values: Optional[Tuple[Any, ...]] = None


@dataclass(frozen=True)
class SplitStep(OperationRecord):
    """B-tree node split with median promotion."""
    kind: ClassVar[OperationType] = OperationType.SPLIT

    parent: Any
    child: Any
    new_child: Any
    middle_key: Any
    step: str = "split_complete"


@dataclass(frozen=True)
class MergeStep(OperationRecord):
    """B-tree sibling merge, or root replacement after a merge."""
    kind: ClassVar[OperationType] = OperationType.MERGE

    step: str
    left_node: Any = None
    right_node: Any = None
    parent: Any = None
    separator: Any = None
    new_root: Any = None


@dataclass(frozen=True)
class BorrowStep(OperationRecord):
    """B-tree key rotation from a sibling through the parent."""
    kind: ClassVar[OperationType] = OperationType.BORROW

    step: str
    node: Any
    sibling: Any
    parent: Any = None
    key: Any = None


@dataclass(frozen=True)
class QueryStep(OperationRecord):
    """Read-only query over a trie (prefix, pattern, enumeration)."""
    kind: ClassVar[OperationType] = OperationType.QUERY

    query: str
    step: str
    text: Optional[str] = None
    char: Optional[str] = None
    node: Any = None
    path: Optional[str] = None
    count: Optional[int] = None


class OperationLog:
    """Append-only sequence of step records plus a replay cursor.

    The log always records; step mode only tells the consumer whether it
    is replaying. ``current_step`` indexes the next record that
    :meth:`next_step` will return.
    """

    def __init__(self,
                 step_mode: bool = False,
                 step_policy: StepModePolicy = StepModePolicy.RESET_ON_ENABLE):
        """Initialize an empty log.

        Args:
            step_mode: Whether step mode starts enabled
            step_policy: How the cursor reacts when step mode is switched on
        """
        self._records: List[OperationRecord] = []
        self.current_step = 0
        self.step_mode = step_mode
        self.step_policy = step_policy

    def append(self, record: OperationRecord) -> OperationRecord:
        """Append a record to the end of the log.

        Raises:
            TypeError: If record is not an OperationRecord
        """
        if not isinstance(record, OperationRecord):
            raise TypeError(f"Expected an OperationRecord, got {type(record).__name__}")
        self._records.append(record)
        return record

    @property
    def records(self) -> Tuple[OperationRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[OperationRecord]:
        return iter(tuple(self._records))

    def __getitem__(self, index):
        return self._records[index]

    def mark(self) -> int:
        """Return the current length, for use with :meth:`since`."""
        return len(self._records)

    def since(self, mark: int) -> List[OperationRecord]:
        """Records appended after ``mark`` was taken."""
        return self._records[mark:]

    def of_kind(self, *kinds: OperationType) -> List[OperationRecord]:
        """Records whose kind is one of ``kinds``."""
        return [r for r in self._records if r.kind in kinds]

    def set_step_mode(self, enabled: bool) -> None:
        """Enable or disable step mode.

        Under ``RESET_ON_ENABLE`` switching from off to on rewinds the
        cursor; switching off, or enabling twice, leaves it alone.
        """
        enabled = bool(enabled)
        if (enabled and not self.step_mode
                and self.step_policy == StepModePolicy.RESET_ON_ENABLE):
            self.current_step = 0
        self.step_mode = enabled

    def next_step(self) -> Optional[OperationRecord]:
        """Return the record at the cursor and advance, or None at the end."""
        if self.current_step < len(self._records):
            record = self._records[self.current_step]
            self.current_step += 1
            return record
        return None

    def peek_step(self) -> Optional[OperationRecord]:
        """Return the record at the cursor without advancing."""
        if self.current_step < len(self._records):
            return self._records[self.current_step]
        return None

    def has_next(self) -> bool:
        return self.current_step < len(self._records)

    def remaining(self) -> int:
        return len(self._records) - self.current_step

    def reset_steps(self) -> None:
        self.current_step = 0

    def clear(self) -> None:
        """Truncate the log and rewind the cursor."""
        self._records = []
        self.current_step = 0

    def to_list(self) -> List[Dict[str, Any]]:
        """Serializable copy of the whole log."""
        return [record.to_dict() for record in self._records]
