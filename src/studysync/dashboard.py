"""Progress summaries for the dashboard and plan views."""
from studysync.models import TAG_REVIEW

UNIT_LABELS = {
    "Questions": "questions",
    "Sections": "sections",
    "Articles": "articles",
    "Pages": "pages",
}


def unit_label(unit_kind: str) -> str:
    return UNIT_LABELS.get(unit_kind, "items")


def get_progress_label(percent: float) -> str:
    if percent >= 100:
        return "DONE"
    elif percent >= 60:
        return "ON TRACK"
    elif percent >= 20:
        return "IN PROGRESS"
    return "JUST STARTED"


def get_progress_color(percent: float) -> str:
    if percent >= 100:
        return "green"
    elif percent >= 60:
        return "cyan"
    elif percent >= 20:
        return "yellow"
    return "red"


def _percent(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(done / total * 100, 2)


def module_progress(module) -> float:
    return _percent(module.completed_items, module.total_items)


def resource_progress(resource) -> float:
    total = sum(m.total_items for m in resource.modules)
    done = sum(m.completed_items for m in resource.modules)
    return _percent(done, total)


def overall_progress(resources: list) -> float:
    total = sum(m.total_items for r in resources for m in r.modules)
    done = sum(m.completed_items for r in resources for m in r.modules)
    return _percent(done, total)


def task_label(task) -> str:
    if task.tag == TAG_REVIEW and task.source_knowledge_point:
        return f"Weak spot: {task.source_knowledge_point} ({task.module_name})"
    return task.module_name


def get_plan_stats(state) -> dict:
    completed = [t for t in state.daily_plan if t.is_completed]
    return {
        "tasks": len(state.daily_plan),
        "completed": len(completed),
        "pending": len(state.daily_plan) - len(completed),
        "items_done": sum(t.completed_amount for t in state.daily_plan),
        "review_backlog": len(state.review_queue),
        "overall_progress": overall_progress(state.resources),
    }
