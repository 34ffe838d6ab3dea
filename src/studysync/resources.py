"""Resource and module administration."""
import logging
import random

from studysync.ledger import apply_delta, find_module, find_resource
from studysync.models import UNIT_KINDS, Module, Resource, ValidationError, new_id

logger = logging.getLogger(__name__)

PASTEL_COLORS = ["#fca5a5", "#fdba74", "#fcd34d", "#86efac", "#67e8f9", "#93c5fd", "#c4b5fd", "#f9a8d4"]


def random_color(rng=random) -> str:
    return rng.choice(PASTEL_COLORS)


def new_manual_resource(name: str = "", module_name: str = "", total_items: int | None = None) -> Resource:
    """A one-module resource built from the manual add form."""
    return Resource(
        id=new_id(),
        name=name.strip() or "New resource",
        description="Added manually",
        modules=[Module(
            id=new_id(),
            name=module_name.strip() or "General unit",
            unit_kind="Questions",
            total_items=total_items if total_items and total_items > 0 else 100,
            color="#a78bfa",
        )],
    )


def resource_from_template(template: dict, topic: str = "", rng=random) -> Resource:
    """Turn a generated {name, description, modules} template into a Resource."""
    modules = []
    for m in template.get("modules", []):
        kind = m.get("unit_kind")
        modules.append(Module(
            id=new_id(),
            name=m["name"],
            unit_kind=kind if kind in UNIT_KINDS else "Questions",
            total_items=max(int(m.get("total_items") or 0), 0),
            color=random_color(rng),
        ))
    return Resource(
        id=new_id(),
        name=template["name"],
        description=template.get("description") or f"Generated plan for {topic}",
        modules=modules,
    )


def add_resource(state, resource: Resource) -> Resource:
    if any(r.id == resource.id for r in state.resources):
        raise ValidationError(f"A resource with id {resource.id} already exists.")
    state.resources.append(resource)
    return resource


def rename_resource(state, resource_id: str, name: str) -> None:
    if not name or not name.strip():
        raise ValidationError("Name cannot be empty.")
    resource = find_resource(state.resources, resource_id)
    if resource:
        resource.name = name.strip()


def delete_resource(state, resource_id: str) -> None:
    """Drop a resource, its modules and every task planned against it."""
    state.resources[:] = [r for r in state.resources if r.id != resource_id]
    state.daily_plan[:] = [t for t in state.daily_plan if t.resource_id != resource_id]


def add_module(state, resource_id: str, name: str, total_items: int, unit_kind: str | None = None, rng=random):
    if not name or not name.strip():
        raise ValidationError("Module name cannot be empty.")
    if total_items is None or total_items <= 0:
        raise ValidationError("Total items must be a positive number.")
    if unit_kind is not None and unit_kind not in UNIT_KINDS:
        raise ValidationError(f"Unknown unit kind: {unit_kind}")
    resource = find_resource(state.resources, resource_id)
    if resource is None:
        return None
    if unit_kind is None:
        unit_kind = resource.modules[0].unit_kind if resource.modules else "Questions"
    module = Module(
        id=new_id(),
        name=name.strip(),
        unit_kind=unit_kind,
        total_items=total_items,
        color=random_color(rng),
    )
    resource.modules.append(module)
    return module


def delete_module(state, resource_id: str, module_id: str) -> None:
    resource = find_resource(state.resources, resource_id)
    if resource is None:
        return
    resource.modules[:] = [m for m in resource.modules if m.id != module_id]
    state.daily_plan[:] = [t for t in state.daily_plan if t.module_id != module_id]


def edit_module_total(state, resource_id: str, module_id: str, total_items: int) -> None:
    """Admin correction of a module's size; completed count is clamped to fit."""
    if total_items is None or total_items < 0:
        raise ValidationError("Total items cannot be negative.")
    found = find_module(state.resources, resource_id, module_id)
    if found is None:
        return
    _, module = found
    module.total_items = total_items
    apply_delta(state.resources, resource_id, module_id,
                min(module.completed_items, total_items) - module.completed_items)


def pick_random_module(resource: Resource, rng=random):
    """Random module for the dice button: incomplete ones first, else any."""
    if not resource.modules:
        return None
    pending = [m for m in resource.modules if m.completed_items < m.total_items]
    return rng.choice(pending or resource.modules)
