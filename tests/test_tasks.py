import pytest

from studysync.ledger import find_module
from studysync.models import ValidationError
from studysync.tasks import (
    add_manual_task, click_task, delete_task, find_task, needs_settlement,
    settle_task, toggle_task, update_task_amounts,
)


def _progress(state, resource_id="app-fenbi", module_id="m-fb-law"):
    return find_module(state.resources, resource_id, module_id)[1].completed_items


@pytest.fixture
def task(state):
    return add_manual_task(state, "app-fenbi", "m-fb-law", 20)


def test_add_manual_task(state, task):
    assert task.tag == "Manual"
    assert task.target_amount == 20
    assert task.resource_name == "Fenbi App"
    assert task.module_name == "Law and Regulation Drills"
    assert state.daily_plan == [task]


def test_add_manual_task_rejects_non_positive(state):
    with pytest.raises(ValidationError):
        add_manual_task(state, "app-fenbi", "m-fb-law", 0)
    assert state.daily_plan == []


def test_add_manual_task_unknown_module(state):
    assert add_manual_task(state, "app-fenbi", "nope", 5) is None
    assert state.daily_plan == []


def test_toggle_complete_applies_delta(state, task):
    toggle_task(state, task.id)
    assert task.is_completed
    assert task.completed_amount == 20
    assert _progress(state) == 20


def test_toggle_round_trip_restores_progress(state, task):
    _before = _progress(state)
    toggle_task(state, task.id)
    toggle_task(state, task.id)
    assert task.is_completed is False
    assert task.completed_amount == 0
    assert _progress(state) == _before


def test_toggle_round_trip_near_cap_loses_clamped_credit(state):
    module = find_module(state.resources, "app-fenbi", "m-fb-read")[1]
    module.completed_items = 18
    task = add_manual_task(state, "app-fenbi", "m-fb-read", 5)
    toggle_task(state, task.id)
    assert module.completed_items == 20
    toggle_task(state, task.id)
    # Un-completing takes back the full target, not the clamped gain.
    assert module.completed_items == 15


def test_toggle_from_partial_only_adds_remainder(state, task):
    update_task_amounts(state, task.id, 20, 8)
    assert _progress(state) == 8
    toggle_task(state, task.id)
    assert _progress(state) == 20


def test_toggle_missing_task_is_noop(state):
    toggle_task(state, "missing")
    assert state.daily_plan == []


def test_needs_settlement_only_for_pending(state, task):
    assert needs_settlement(state, task.id)
    toggle_task(state, task.id)
    assert not needs_settlement(state, task.id)
    assert not needs_settlement(state, "missing")


def test_click_completed_task_uncompletes(state, task):
    assert click_task(state, task.id) is True  # pending: settlement needed, nothing changed
    assert task.is_completed is False
    toggle_task(state, task.id)
    assert click_task(state, task.id) is False
    assert task.is_completed is False
    assert _progress(state) == 0


def test_settle_without_mistakes_adds_no_review(state, task):
    assert settle_task(state, task.id, 0, "anything") is None
    assert task.is_completed
    assert state.review_queue == []
    assert _progress(state) == 20


def test_settle_with_mistakes_queues_one_item(state, task):
    item = settle_task(state, task.id, 4, "education law")
    assert task.is_completed
    assert len(state.review_queue) == 1
    assert state.review_queue[0] is item
    assert item.wrong_count == 4
    assert item.knowledge_point == "education law"
    assert item.module_id == "m-fb-law"


def test_settle_blank_knowledge_point(state, task):
    item = settle_task(state, task.id, 2, "")
    assert item.knowledge_point is None


def test_settle_rejects_negative(state, task):
    with pytest.raises(ValidationError):
        settle_task(state, task.id, -1)
    assert task.is_completed is False


def test_settle_completed_task_is_noop(state, task):
    toggle_task(state, task.id)
    assert settle_task(state, task.id, 3) is None
    assert task.is_completed
    assert state.review_queue == []


def test_update_amounts_sets_completion(state, task):
    update_task_amounts(state, task.id, 10, 10)
    assert task.is_completed
    assert _progress(state) == 10
    update_task_amounts(state, task.id, 10, 3)
    assert task.is_completed is False
    assert _progress(state) == 3


def test_update_amounts_never_queues_review(state, task):
    settle_task(state, task.id, 0)
    update_task_amounts(state, task.id, 20, 5)
    assert state.review_queue == []


@pytest.mark.parametrize("target, completed", [(0, 1), (-3, 1), (5, -1)])
def test_update_amounts_validation(state, task, target, completed):
    with pytest.raises(ValidationError):
        update_task_amounts(state, task.id, target, completed)
    assert task.target_amount == 20
    assert task.completed_amount == 0


def test_delete_reverses_progress(state, task):
    other = add_manual_task(state, "app-fenbi", "m-fb-law", 7)
    toggle_task(state, other.id)
    update_task_amounts(state, task.id, 20, 12)
    assert _progress(state) == 19
    assert delete_task(state, task.id)
    assert _progress(state) == 7
    assert find_task(state, task.id) is None


def test_delete_reversal_clamps_at_zero(state, task):
    toggle_task(state, task.id)
    find_module(state.resources, "app-fenbi", "m-fb-law")[1].completed_items = 5
    delete_task(state, task.id)
    assert _progress(state) == 0


def test_delete_missing_task(state):
    assert delete_task(state, "missing") is False


def test_task_survives_module_rename(state, task):
    find_module(state.resources, "app-fenbi", "m-fb-law")[1].name = "Renamed"
    toggle_task(state, task.id)
    assert task.module_name == "Law and Regulation Drills"
    assert _progress(state) == 20
