"""Tests for the operation log and step replay cursor."""

import dataclasses
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from treeexplorerlib import StepModePolicy, TreeConfig, create_tree
from treeexplorerlib.core.oplog import (
    InsertStep,
    OperationLog,
    OperationType,
    RotationStep,
    SearchStep,
    SwapStep,
)


class TestOperationRecords:
    """Step records are immutable, typed and serializable."""

    def test_record_kind_and_type(self):
        record = InsertStep(step='create_root', value=5, node=1)
        assert record.kind is OperationType.INSERT
        assert record.type == 'insert'

    def test_records_are_frozen(self):
        record = SearchStep(step='found', value=5)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.step = 'not_found'

    def test_to_dict_omits_unset_fields(self):
        record = InsertStep(step='insert_left', value=20, node=4, parent=2, comparison='20 < 30')
        assert record.to_dict() == {
            'type': 'insert',
            'step': 'insert_left',
            'value': 20,
            'node': 4,
            'parent': 2,
            'comparison': '20 < 30',
        }

    def test_default_step_names(self):
        assert SwapStep(index1=0, index2=1, value1=1, value2=2).step == 'swap'
        assert RotationStep(step='rotate', rotation='left').rotation == 'left'


class TestOperationLog:
    """Append, filter and replay behaviour of OperationLog."""

    def _filled_log(self, count=3, **kwargs):
        log = OperationLog(**kwargs)
        for i in range(count):
            log.append(InsertStep(step='add_to_end', value=i, index=i))
        return log

    def test_append_rejects_non_records(self):
        log = OperationLog()
        with pytest.raises(TypeError):
            log.append({'type': 'insert'})

    def test_replay_yields_records_in_order_then_none(self):
        log = self._filled_log()
        replayed = []
        while log.has_next():
            replayed.append(log.next_step())
        assert replayed == list(log.records)
        assert log.next_step() is None
        assert log.remaining() == 0

    def test_peek_does_not_advance(self):
        log = self._filled_log()
        assert log.peek_step() is log.records[0]
        assert log.current_step == 0

    def test_records_view_is_read_only_tuple(self):
        log = self._filled_log()
        assert isinstance(log.records, tuple)
        assert len(log) == 3

    def test_mark_and_since(self):
        log = self._filled_log(2)
        mark = log.mark()
        log.append(InsertStep(step='extra'))
        assert [r.step for r in log.since(mark)] == ['extra']

    def test_of_kind_filters(self):
        log = self._filled_log(2)
        log.append(RotationStep(step='complete', rotation='right'))
        assert len(log.of_kind(OperationType.ROTATION)) == 1
        assert len(log.of_kind(OperationType.INSERT, OperationType.ROTATION)) == 3

    def test_enable_resets_cursor_by_default(self):
        log = self._filled_log()
        log.next_step()
        log.next_step()
        log.set_step_mode(True)
        assert log.current_step == 0

    def test_enable_twice_keeps_cursor(self):
        log = self._filled_log()
        log.set_step_mode(True)
        log.next_step()
        log.set_step_mode(True)
        assert log.current_step == 1

    def test_disable_then_enable_resets(self):
        log = self._filled_log()
        log.set_step_mode(True)
        log.next_step()
        log.set_step_mode(False)
        assert log.current_step == 1
        log.set_step_mode(True)
        assert log.current_step == 0

    def test_keep_position_policy(self):
        log = self._filled_log(step_policy=StepModePolicy.KEEP_POSITION)
        log.next_step()
        log.next_step()
        log.set_step_mode(True)
        assert log.current_step == 2

    def test_clear_truncates_and_rewinds(self):
        log = self._filled_log()
        log.next_step()
        log.clear()
        assert len(log) == 0
        assert log.current_step == 0
        assert log.next_step() is None

    def test_to_list(self):
        log = self._filled_log(2)
        assert log.to_list()[1] == {'type': 'insert', 'step': 'add_to_end', 'value': 1, 'index': 1}


def test_tree_step_replay_matches_history():
    """A tree's replay walks its operation history and ends with None."""
    print("\n=== Test: Tree Step Replay ===")
    tree = create_tree('bst')
    for value in [50, 30, 70]:
        tree.insert(value)

    tree.set_step_mode(True)
    assert tree.is_step_mode

    replayed = []
    step = tree.get_next_step()
    while step is not None:
        replayed.append(step)
        step = tree.get_next_step()

    assert replayed == list(tree.operation_history)
    assert tree.current_step == len(tree.operation_history)

    tree.reset_steps()
    assert tree.current_step == 0
    print("[PASS] Replay returned every record in order")


def test_step_mode_from_config():
    tree = create_tree('avl', TreeConfig.stepping())
    assert tree.is_step_mode
    tree.insert(1)
    assert tree.get_next_step().step == 'create_root'


def test_replay_continues_into_new_records():
    tree = create_tree('bst')
    tree.insert(10)
    tree.set_step_mode(True)
    assert tree.get_next_step().step == 'create_root'
    assert tree.get_next_step() is None

    tree.insert(5)
    assert tree.get_next_step().step == 'insert_left'
