"""Fire-and-forget AI tip requests for individual tasks."""
import asyncio
import logging
from dataclasses import dataclass

from studysync.ai import generate_knowledge_tip
from studysync.tasks import find_task

logger = logging.getLogger(__name__)

FALLBACK_TIP = "Could not generate advice right now, please try again later."


@dataclass(eq=False)
class TipHandle:
    task_id: str
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class TipRegistry:
    """In-flight tip requests keyed by task id.

    Several requests for the same task may be outstanding at once; each writes
    its result when it lands.
    """

    def __init__(self):
        self._pending: dict[str, list[TipHandle]] = {}

    def start(self, task_id: str) -> TipHandle:
        handle = TipHandle(task_id)
        self._pending.setdefault(task_id, []).append(handle)
        return handle

    def finish(self, handle: TipHandle) -> None:
        handles = self._pending.get(handle.task_id, [])
        if handle in handles:
            handles.remove(handle)
        if not handles:
            self._pending.pop(handle.task_id, None)

    def pending(self, task_id: str) -> int:
        return len(self._pending.get(task_id, []))

    def invalidate(self, task_id: str) -> None:
        for handle in self._pending.pop(task_id, []):
            handle.cancel()

    def invalidate_missing(self, live_task_ids: set) -> None:
        """Cancel requests for every task that is no longer in the plan."""
        for task_id in [t for t in self._pending if t not in live_task_ids]:
            self.invalidate(task_id)


def tip_topic(task) -> str:
    return task.source_knowledge_point or task.module_name


def _set_loading(state, task_id: str, loading: bool) -> None:
    task = find_task(state, task_id)
    if task:
        task.is_ai_loading = loading


def _write_tip(state, task_id: str, tip: str) -> None:
    task = find_task(state, task_id)
    if task:
        task.is_ai_loading = False
        task.ai_tip = tip


async def request_tip(store, task_id: str, generate=generate_knowledge_tip) -> str | None:
    """Ask for a tip and write it onto the task if the task still exists.

    The blocking generator runs in a worker thread so other actions can be
    dispatched meanwhile. Returns the text written, or None if the task was
    gone before or after the call.
    """
    task = find_task(store.state, task_id)
    if task is None:
        return None
    handle = store.tips.start(task_id)
    store.dispatch(_set_loading, task_id, True)
    try:
        tip = await asyncio.to_thread(generate, task.resource_name, task.module_name, tip_topic(task))
    except Exception:
        logger.exception("Tip generation failed for task %s", task_id)
        tip = None
    finally:
        store.tips.finish(handle)
    if handle.cancelled:
        logger.debug("Task %s was removed while its tip was pending; result dropped", task_id)
        return None
    text = tip or FALLBACK_TIP
    store.dispatch(_write_tip, task_id, text)
    return text
