"""FIFO pool of wrong items waiting to be folded back into a plan."""
from studysync.models import ReviewItem, new_id, now_iso


def enqueue(queue: list, item: ReviewItem) -> None:
    queue.append(item)


def peek_batch(queue: list, n: int) -> list:
    """First n items in queue order, without removing them."""
    return list(queue[:max(n, 0)])


def drain(queue: list, consumed_ids) -> int:
    """Remove every item whose id is in consumed_ids. Returns how many went."""
    consumed = set(consumed_ids)
    before = len(queue)
    queue[:] = [item for item in queue if item.id not in consumed]
    return before - len(queue)


def make_review_item(task, wrong_count: int, knowledge_point: str | None = None) -> ReviewItem:
    """Snapshot a task's resource/module references into a new review item."""
    label = knowledge_point.strip() if knowledge_point else ""
    return ReviewItem(
        id=new_id(),
        resource_id=task.resource_id,
        resource_name=task.resource_name,
        module_id=task.module_id,
        module_name=task.module_name,
        wrong_count=wrong_count,
        knowledge_point=label or None,
        created_at=now_iso(),
    )
