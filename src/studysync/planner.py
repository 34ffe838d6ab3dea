"""Piggy Run: stage-conditioned daily plan generator.

Each stage runs a fixed policy of up to three pulls:

* a review pull, turning the head of the review queue into ReviewR tasks;
* a core pull from the primary resource;
* auxiliary/side pulls from the secondary and tertiary resources.

Resources are located by name substring, so renaming a seeded resource away
from its keyword takes it out of the automatic plan. A pull whose resource or
module cannot be found is skipped; a partial plan is still a valid plan.
"""
import logging
import random
from dataclasses import dataclass, field
from datetime import date

from studysync.models import (
    STAGE_FOUNDATION, STAGE_REVIEW, STAGE_SPRINT,
    TAG_AUX, TAG_CORE, TAG_REVIEW, TAG_SIDE,
    DailyTask, new_id, now_iso,
)
from studysync.ledger import find_module
from studysync.review_queue import drain, peek_batch

logger = logging.getLogger(__name__)

PRIMARY_RESOURCE = "Yiqikao"
SECONDARY_RESOURCE = "Fenbi"
TERTIARY_RESOURCE = "Changyan"

ODD_DAY_MODULES = ("Subject 1", "Comprehensive")
EVEN_DAY_MODULES = ("Subject 2", "Education")
VIDEO_MODULE = "Video"
DRILL_MODULE = "Drills"
VIDEO_WEEKDAYS = (1, 3, 5)  # isoweekday: Mon, Wed, Fri

STAGE_MESSAGES = {
    STAGE_FOUNDATION: "Foundation plan ready: push new progress first.",
    STAGE_REVIEW: "Strengthen plan ready: mix old and new, patch the gaps.",
    STAGE_SPRINT: "Sprint plan ready: full simulation, everything on.",
}


@dataclass
class PlanResult:
    tasks: list = field(default_factory=list)
    consumed_review_ids: list = field(default_factory=list)
    message: str = ""

    @property
    def review_task_count(self) -> int:
        return sum(1 for t in self.tasks if t.tag == TAG_REVIEW)


def find_resource_by_name(resources: list, name_part: str):
    return next((r for r in resources if name_part in r.name), None)


def find_module_by_name(resource, *name_parts):
    """First module (list order) whose name contains any of the given parts."""
    return next(
        (m for m in resource.modules if any(part in m.name for part in name_parts)),
        None,
    )


def incomplete_modules(resource) -> list:
    return [m for m in resource.modules if m.completed_items < m.total_items]


def completed_modules(resource) -> list:
    return [m for m in resource.modules if m.completed_items >= m.total_items]


def make_task(resource, module, amount: int, tag: str, note: str | None = None,
              knowledge_point: str | None = None) -> DailyTask:
    return DailyTask(
        id=new_id(),
        resource_id=resource.id,
        resource_name=resource.name,
        module_id=module.id,
        module_name=module.name,
        target_amount=amount,
        created_at=now_iso(),
        tag=tag,
        note=note,
        source_knowledge_point=knowledge_point,
    )


def _pull_reviews(state, result: PlanResult, limit: int, size, note: str) -> None:
    for item in peek_batch(state.review_queue, limit):
        found = find_module(state.resources, item.resource_id, item.module_id)
        if found is None:
            # Stays queued until its module comes back or the queue is reset.
            logger.debug("Review item %s points at a missing module; skipped", item.id)
            continue
        resource, module = found
        result.tasks.append(make_task(
            resource, module, size(item), TAG_REVIEW,
            note=note, knowledge_point=item.knowledge_point,
        ))
        result.consumed_review_ids.append(item.id)


def _foundation(state, result: PlanResult, today: date, rng) -> None:
    _pull_reviews(
        state, result, 2,
        lambda item: item.wrong_count if item.wrong_count > 0 else 5,
        "Foundation review.",
    )

    primary = find_resource_by_name(state.resources, PRIMARY_RESOURCE)
    if primary:
        keywords = ODD_DAY_MODULES if today.day % 2 == 1 else EVEN_DAY_MODULES
        module = find_module_by_name(primary, *keywords)
        if module is None or module.is_complete:
            pending = incomplete_modules(primary)
            module = pending[0] if pending else None
        if module:
            result.tasks.append(make_task(primary, module, 30, TAG_CORE))

    for name, tag in ((SECONDARY_RESOURCE, TAG_AUX), (TERTIARY_RESOURCE, TAG_SIDE)):
        resource = find_resource_by_name(state.resources, name)
        if resource is None:
            continue
        pending = incomplete_modules(resource)
        if pending:
            result.tasks.append(make_task(resource, pending[0], 1, tag))


def _strengthen(state, result: PlanResult, today: date, rng) -> None:
    _pull_reviews(
        state, result, 5,
        lambda item: max(5, item.wrong_count * 2),
        "Strengthen-stage deep pass.",
    )

    primary = find_resource_by_name(state.resources, PRIMARY_RESOURCE)
    if primary:
        module = None
        if rng.random() > 0.5:
            done = completed_modules(primary)
            if done:
                module = rng.choice(done)
                result.tasks.append(make_task(primary, module, 20, TAG_CORE))
        if module is None:
            pending = incomplete_modules(primary)
            if pending:
                result.tasks.append(make_task(primary, pending[0], 40, TAG_CORE))

    secondary = find_resource_by_name(state.resources, SECONDARY_RESOURCE)
    if secondary:
        key = VIDEO_MODULE if today.isoweekday() in VIDEO_WEEKDAYS else DRILL_MODULE
        module = find_module_by_name(secondary, key)
        if module is None and secondary.modules:
            module = secondary.modules[0]
        if module:
            result.tasks.append(make_task(secondary, module, 1, TAG_AUX))


def _sprint(state, result: PlanResult, today: date, rng) -> None:
    _pull_reviews(state, result, 10, lambda item: 1, "Sprint sweep: clear it.")

    primary = find_resource_by_name(state.resources, PRIMARY_RESOURCE)
    if primary and primary.modules:
        module = rng.choice(primary.modules)
        result.tasks.append(make_task(primary, module, 100, TAG_CORE, note="Full simulation run"))


POLICIES = {
    STAGE_FOUNDATION: _foundation,
    STAGE_REVIEW: _strengthen,
    STAGE_SPRINT: _sprint,
}


def generate_plan(state, today: date | None = None, rng=random) -> PlanResult:
    """Build today's tasks for the current stage without touching state.

    rng only needs random() and choice(); pass a seeded random.Random or a
    scripted stand-in for repeatable plans.
    """
    today = today or date.today()
    result = PlanResult()
    POLICIES[state.study_stage](state, result, today, rng)
    result.message = (
        f"{STAGE_MESSAGES[state.study_stage]} "
        f"{len(result.tasks)} tasks added, {len(result.consumed_review_ids)} review items pulled."
    )
    return result


def commit_plan(state, result: PlanResult) -> None:
    """Drain the consumed review items and append the new tasks."""
    drain(state.review_queue, result.consumed_review_ids)
    state.daily_plan.extend(result.tasks)


def run_plan(state, today: date | None = None, rng=random) -> PlanResult:
    result = generate_plan(state, today=today, rng=rng)
    commit_plan(state, result)
    logger.info("Piggy Run (%s): %s", state.study_stage, result.message)
    return result
