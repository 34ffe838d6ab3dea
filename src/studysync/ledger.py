"""Progress ledger: the only place module completion counts change."""
import logging

logger = logging.getLogger(__name__)


def find_resource(resources: list, resource_id: str):
    return next((r for r in resources if r.id == resource_id), None)


def find_module(resources: list, resource_id: str, module_id: str):
    """Return (resource, module) or None if either lookup misses."""
    resource = find_resource(resources, resource_id)
    if resource is None:
        return None
    module = next((m for m in resource.modules if m.id == module_id), None)
    if module is None:
        return None
    return resource, module


def apply_delta(resources: list, resource_id: str, module_id: str, delta: int) -> None:
    """Add delta to a module's completed count, clamped into [0, total_items]."""
    if delta == 0:
        return
    found = find_module(resources, resource_id, module_id)
    if found is None:
        logger.debug("No module %s/%s; dropping delta %d", resource_id, module_id, delta)
        return
    _, module = found
    module.completed_items = min(module.total_items, max(0, module.completed_items + delta))
