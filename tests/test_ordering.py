"""Tests for the move/reorder planner (task_engine/ordering.py)."""

from __future__ import annotations

import math

import pytest

from taskboard.task_engine.errors import NotFoundError
from taskboard.task_engine.model import Task, TaskStatus
from taskboard.task_engine.ordering import (
    is_dense,
    normalize_order,
    order_gaps,
    ordered_bucket,
    plan_insert,
    plan_move,
    plan_removal,
    plan_repair,
)

TODO = TaskStatus.TODO
DOING = TaskStatus.IN_PROGRESS
DONE = TaskStatus.DONE


def _board(**buckets: list[int]) -> list[Task]:
    """Build tasks from ``todo=[ids], doing=[ids], done=[ids]`` in bucket order."""
    names = {"todo": TODO, "doing": DOING, "done": DONE}
    tasks: list[Task] = []
    for name, ids in buckets.items():
        for order, tid in enumerate(ids):
            tasks.append(Task(id=tid, title=f"task {tid}", status=names[name], order=order))
    return tasks


def _apply(tasks: list[Task], placements) -> list[Task]:
    out = [t.copy() for t in tasks]
    by_id = {t.id: t for t in out}
    for tid, (status, order) in placements.items():
        by_id[tid].status = status
        by_id[tid].order = order
    return out


def _ids(tasks: list[Task], status: TaskStatus) -> list[int]:
    return [t.id for t in ordered_bucket(tasks, status)]


class TestNormalizeOrder:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, None),
            (0, 0),
            (5, 5),
            (-3, 0),
            (2.0, 2),
            (1.5, 0),
            (-0.5, 0),
            (math.nan, 0),
            (math.inf, None),
            (-math.inf, 0),
            ("4", 4),
            ("2.0", 2),
            (" 3 ", 3),
            ("1.5", 0),
            ("-2", 0),
            ("inf", None),
            ("abc", 0),
            (True, 0),
            ([1], 0),
        ],
    )
    def test_values(self, raw, expected) -> None:
        assert normalize_order(raw) == expected


class TestPlanMove:
    def test_unknown_id_raises(self) -> None:
        with pytest.raises(NotFoundError):
            plan_move(_board(todo=[1]), 99, DONE, 0)

    def test_cross_bucket_scenario(self) -> None:
        # todo = [A, B, C]; move B to done at 0
        tasks = _board(todo=[1, 2, 3], done=[4, 5])
        plan = plan_move(tasks, 2, DONE, 0)
        after = _apply(tasks, plan.placements)
        assert _ids(after, TODO) == [1, 3]
        assert _ids(after, DONE) == [2, 4, 5]
        assert [t.order for t in ordered_bucket(after, DONE)] == [0, 1, 2]
        assert is_dense(after)

    def test_only_changed_tasks_are_placed(self) -> None:
        tasks = _board(todo=[1, 2, 3], done=[4])
        plan = plan_move(tasks, 3, DONE, 5)
        # task 3 was last in todo, so nothing else in todo moves; 4 stays at 0
        assert plan.placements == {3: (DONE, 1)}

    def test_same_bucket_move_down(self) -> None:
        tasks = _board(todo=[1, 2, 3, 4])
        plan = plan_move(tasks, 1, TODO, 2)
        after = _apply(tasks, plan.placements)
        assert _ids(after, TODO) == [2, 3, 1, 4]

    def test_same_bucket_move_up(self) -> None:
        tasks = _board(todo=[1, 2, 3, 4])
        plan = plan_move(tasks, 4, TODO, 0)
        after = _apply(tasks, plan.placements)
        assert _ids(after, TODO) == [4, 1, 2, 3]

    def test_noop_same_place(self) -> None:
        tasks = _board(todo=[1, 2, 3])
        plan = plan_move(tasks, 2, TODO, 1)
        assert plan.is_noop
        assert plan.position == 1

    def test_clamps_past_end(self) -> None:
        tasks = _board(todo=[1, 2], done=[3, 4])
        plan = plan_move(tasks, 1, DONE, 99)
        assert plan.position == 2
        after = _apply(tasks, plan.placements)
        assert _ids(after, DONE) == [3, 4, 1]

    def test_clamps_past_end_within_bucket(self) -> None:
        tasks = _board(todo=[1, 2, 3])
        plan = plan_move(tasks, 1, TODO, 10)
        assert plan.position == 2
        assert _ids(_apply(tasks, plan.placements), TODO) == [2, 3, 1]

    def test_none_appends(self) -> None:
        tasks = _board(todo=[1], doing=[2, 3])
        plan = plan_move(tasks, 1, DOING, None)
        assert _ids(_apply(tasks, plan.placements), DOING) == [2, 3, 1]

    def test_only_member_into_empty_bucket(self) -> None:
        tasks = _board(todo=[1])
        plan = plan_move(tasks, 1, DONE, 0)
        after = _apply(tasks, plan.placements)
        assert _ids(after, TODO) == []
        assert _ids(after, DONE) == [1]
        assert after[0].order == 0

    def test_same_and_cross_bucket_agree(self) -> None:
        # Landing 3 at rank 1 of todo must give the same todo contents whether
        # it starts in todo or arrives from another bucket.
        from_same = _board(todo=[1, 2, 3, 4])
        from_other = _board(todo=[1, 2, 4], doing=[3])
        a = _apply(from_same, plan_move(from_same, 3, TODO, 1).placements)
        b = _apply(from_other, plan_move(from_other, 3, TODO, 1).placements)
        assert _ids(a, TODO) == _ids(b, TODO) == [1, 3, 2, 4]
        assert [t.order for t in ordered_bucket(a, TODO)] == [t.order for t in ordered_bucket(b, TODO)]

    def test_repairs_gaps_in_touched_buckets(self) -> None:
        tasks = [
            Task(id=1, title="a", status=TODO, order=0),
            Task(id=2, title="b", status=TODO, order=5),
            Task(id=3, title="c", status=DONE, order=2),
        ]
        after = _apply(tasks, plan_move(tasks, 1, DONE, 0).placements)
        assert is_dense(after)


class TestPlanInsert:
    def test_append_by_default(self) -> None:
        tasks = _board(todo=[1, 2, 3])
        position, shifted = plan_insert(tasks, TODO, None)
        assert position == 3
        assert shifted == {}

    def test_insert_in_middle_shifts_tail(self) -> None:
        tasks = _board(todo=[1, 2, 3])
        position, shifted = plan_insert(tasks, TODO, 1)
        assert position == 1
        assert shifted == {2: (TODO, 2), 3: (TODO, 3)}

    def test_insert_clamps(self) -> None:
        position, shifted = plan_insert(_board(todo=[1]), TODO, 50)
        assert position == 1
        assert shifted == {}


class TestPlanRemoval:
    def test_delete_middle_compacts(self) -> None:
        tasks = _board(todo=[1, 2, 3])
        placements = plan_removal(tasks, 2)
        assert placements == {3: (TODO, 1)}

    def test_delete_last_is_free(self) -> None:
        assert plan_removal(_board(todo=[1, 2, 3]), 3) == {}

    def test_unknown_id(self) -> None:
        with pytest.raises(NotFoundError):
            plan_removal(_board(todo=[1]), 2)


class TestInvariantChecks:
    def test_order_gaps_reports_bad_buckets(self) -> None:
        tasks = [
            Task(id=1, title="a", status=TODO, order=0),
            Task(id=2, title="b", status=TODO, order=0),
            Task(id=3, title="c", status=DONE, order=1),
            Task(id=4, title="d", status=DOING, order=0),
        ]
        gaps = order_gaps(tasks)
        assert gaps == {TODO: [0, 0], DONE: [1]}
        assert not is_dense(tasks)

    def test_plan_repair(self) -> None:
        tasks = [
            Task(id=1, title="a", status=TODO, order=4),
            Task(id=2, title="b", status=TODO, order=9),
            Task(id=3, title="c", status=DONE, order=0),
        ]
        placements = plan_repair(tasks)
        assert placements == {1: (TODO, 0), 2: (TODO, 1)}
        assert is_dense(_apply(tasks, placements))
