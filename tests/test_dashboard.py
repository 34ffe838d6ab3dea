from studysync.dashboard import (
    get_plan_stats, get_progress_color, get_progress_label, module_progress,
    overall_progress, resource_progress, task_label, unit_label,
)
from studysync.ledger import find_module, find_resource
from studysync.models import Module, Resource
from studysync.planner import make_task
from studysync.tasks import add_manual_task, settle_task


def test_progress_labels():
    assert get_progress_label(100) == "DONE"
    assert get_progress_label(75) == "ON TRACK"
    assert get_progress_label(30) == "IN PROGRESS"
    assert get_progress_label(5) == "JUST STARTED"


def test_progress_colors():
    assert get_progress_color(100) == "green"
    assert get_progress_color(60) == "cyan"
    assert get_progress_color(20) == "yellow"
    assert get_progress_color(0) == "red"


def test_unit_label():
    assert unit_label("Pages") == "pages"
    assert unit_label("Minutes") == "items"


def test_progress_empty():
    assert overall_progress([]) == 0.0
    assert resource_progress(Resource(id="r", name="R")) == 0.0
    assert module_progress(Module(id="m", name="M")) == 0.0


def test_resource_and_overall_progress(state):
    find_module(state.resources, "app-fenbi", "m-fb-read")[1].completed_items = 20
    fenbi = find_resource(state.resources, "app-fenbi")
    # 20 of 49 + 1368 + 20
    assert resource_progress(fenbi) == round(20 / 1437 * 100, 2)
    total = sum(m.total_items for r in state.resources for m in r.modules)
    assert overall_progress(state.resources) == round(20 / total * 100, 2)


def test_task_label_for_review_task(state):
    resource = state.resources[0]
    task = make_task(resource, resource.modules[0], 5, "ReviewR", knowledge_point="ethics")
    assert task_label(task) == "Weak spot: ethics (Subject 1: Comprehensive Quality)"
    task.source_knowledge_point = None
    assert task_label(task) == "Subject 1: Comprehensive Quality"


def test_plan_stats(state):
    done = add_manual_task(state, "app-fenbi", "m-fb-law", 10)
    add_manual_task(state, "app-fenbi", "m-fb-read", 1)
    settle_task(state, done.id, 2)
    stats = get_plan_stats(state)
    assert stats["tasks"] == 2
    assert stats["completed"] == 1
    assert stats["pending"] == 1
    assert stats["items_done"] == 10
    assert stats["review_backlog"] == 1
    assert stats["overall_progress"] > 0
