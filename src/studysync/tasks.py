"""Daily task lifecycle: toggling, settlement, manual edits and deletion.

Every change to a task's completed amount is turned into a delta and pushed
through the progress ledger. Lookups that miss are treated as stale
references and do nothing.
"""
import logging

from studysync.ledger import apply_delta, find_module
from studysync.models import TAG_MANUAL, ValidationError
from studysync.planner import make_task
from studysync.review_queue import enqueue, make_review_item

logger = logging.getLogger(__name__)


def find_task(state, task_id: str):
    return next((t for t in state.daily_plan if t.id == task_id), None)


def toggle_task(state, task_id: str) -> None:
    """Flip completion; completing fills the target, un-completing zeroes it."""
    task = find_task(state, task_id)
    if task is None:
        logger.debug("toggle: no task %s", task_id)
        return
    now_complete = not task.is_completed
    new_amount = task.target_amount if now_complete else 0
    delta = new_amount - task.completed_amount
    task.is_completed = now_complete
    task.completed_amount = new_amount
    apply_delta(state.resources, task.resource_id, task.module_id, delta)


def needs_settlement(state, task_id: str) -> bool:
    """Pending tasks go through settlement; completed ones just toggle back."""
    task = find_task(state, task_id)
    return task is not None and not task.is_completed


def click_task(state, task_id: str) -> bool:
    """Un-complete a completed task. Returns True when settlement is needed instead."""
    if needs_settlement(state, task_id):
        return True
    toggle_task(state, task_id)
    return False


def settle_task(state, task_id: str, wrong_count: int, knowledge_point: str | None = None):
    """Complete a pending task and queue a review item when mistakes were made.

    Returns the new ReviewItem, or None when nothing was queued.
    """
    if wrong_count is None or wrong_count < 0:
        raise ValidationError("Wrong count must be zero or more.")
    task = find_task(state, task_id)
    if task is None or task.is_completed:
        logger.debug("settle: task %s missing or already complete", task_id)
        return None
    toggle_task(state, task_id)
    if wrong_count == 0:
        return None
    item = make_review_item(task, wrong_count, knowledge_point)
    enqueue(state.review_queue, item)
    return item


def update_task_amounts(state, task_id: str, target: int, completed: int) -> None:
    """Set both amounts directly. Never creates a review item."""
    if target is None or target <= 0:
        raise ValidationError("Target must be a positive number.")
    if completed is None or completed < 0:
        raise ValidationError("Completed amount cannot be negative.")
    task = find_task(state, task_id)
    if task is None:
        logger.debug("update: no task %s", task_id)
        return
    delta = completed - task.completed_amount
    task.target_amount = target
    task.completed_amount = completed
    task.is_completed = completed >= target
    apply_delta(state.resources, task.resource_id, task.module_id, delta)


def delete_task(state, task_id: str) -> bool:
    """Remove a task, taking back whatever progress it had credited."""
    task = find_task(state, task_id)
    if task is None:
        return False
    if task.completed_amount > 0:
        apply_delta(state.resources, task.resource_id, task.module_id, -task.completed_amount)
    state.daily_plan.remove(task)
    return True


def add_manual_task(state, resource_id: str, module_id: str, amount: int):
    """Add a hand-picked module to today's plan."""
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be a positive number.")
    found = find_module(state.resources, resource_id, module_id)
    if found is None:
        return None
    resource, module = found
    task = make_task(resource, module, amount, TAG_MANUAL)
    state.daily_plan.append(task)
    return task
