"""Core building blocks shared by every tree engine."""

from .node import Color, TreeNode, NilNode, HeapNode, BTreeNode, TrieNode
from .oplog import (
    OperationType,
    OperationRecord,
    OperationLog,
    InsertStep,
    DeleteStep,
    SearchStep,
    ExtremumStep,
    UpdateStep,
    BalanceUpdateStep,
    RotationStep,
    FixupStep,
    SwapStep,
    HeapifyStep,
    ExtractStep,
    BuildHeapStep,
    SplitStep,
    MergeStep,
    BorrowStep,
    QueryStep,
)
from .base import BaseTree
from . import traversal

__all__ = [
    # Nodes
    'Color',
    'TreeNode',
    'NilNode',
    'HeapNode',
    'BTreeNode',
    'TrieNode',

    # Operation log
    'OperationType',
    'OperationRecord',
    'OperationLog',
    'InsertStep',
    'DeleteStep',
    'SearchStep',
    'ExtremumStep',
    'UpdateStep',
    'BalanceUpdateStep',
    'RotationStep',
    'FixupStep',
    'SwapStep',
    'HeapifyStep',
    'ExtractStep',
    'BuildHeapStep',
    'SplitStep',
    'MergeStep',
    'BorrowStep',
    'QueryStep',

    # Contract
    'BaseTree',
    'traversal',
]
