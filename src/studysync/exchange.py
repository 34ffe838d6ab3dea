"""Export and import of the whole four-slot state as a JSON save code."""
import json
from datetime import datetime
from pathlib import Path

from studysync.models import TAGS, AppState, ValidationError, state_from_dict, state_to_dict

EXPORT_VERSION = "1.0"
PLATFORM = "StudySync CLI"

MODULE_COUNTS = ("total_items", "completed_items")
TASK_COUNTS = ("target_amount", "completed_amount")
REVIEW_COUNTS = ("wrong_count",)


class ImportValidationError(ValidationError):
    """The save code could not be parsed or lacks required data."""


def export_state(state: AppState, exported_at: str | None = None) -> str:
    payload = {
        "meta": {
            "version": EXPORT_VERSION,
            "exported_at": exported_at or datetime.now().isoformat(),
            "platform": PLATFORM,
        },
        "data": state_to_dict(state),
    }
    return json.dumps(payload, ensure_ascii=False)


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _check_counts(entry, keys, what: str) -> None:
    if not isinstance(entry, dict):
        raise ImportValidationError(f"Invalid save code: every {what} must be an object.")
    for key in keys:
        if key in entry and not _is_count(entry[key]):
            raise ImportValidationError(
                f"Invalid save code: {key} of {what} {entry.get('name', entry.get('id'))!r} "
                f"must be a whole number, got {entry[key]!r}."
            )


def _check_entries(parsed: dict) -> None:
    """Reject counts and tags that would break planning after the import."""
    for resource in parsed["resources"]:
        _check_counts(resource, (), "resource")
        modules = resource.get("modules", [])
        if not isinstance(modules, list):
            raise ImportValidationError(
                f"Invalid save code: modules of {resource.get('name')!r} must be a list."
            )
        for module in modules:
            _check_counts(module, MODULE_COUNTS, "module")
    for task in parsed["daily_plan"]:
        _check_counts(task, TASK_COUNTS, "task")
        if "tag" in task and task["tag"] not in TAGS:
            raise ImportValidationError(f"Invalid save code: unknown task tag {task['tag']!r}.")
    for item in parsed.get("review_queue") or []:
        _check_counts(item, REVIEW_COUNTS, "review item")


def parse_import(text: str) -> AppState:
    """Parse an enveloped or bare save code into an AppState.

    Raises ImportValidationError on invalid JSON, when the resources or
    daily plan are missing, or when a count is not a non-negative integer.
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        raise ImportValidationError("Format error: this is not a valid JSON save code.")

    if isinstance(parsed, dict) and isinstance(parsed.get("meta"), dict) and "data" in parsed:
        parsed = parsed["data"]
    if not isinstance(parsed, dict):
        raise ImportValidationError("Invalid save code: expected a JSON object.")
    if not isinstance(parsed.get("resources"), list) or not isinstance(parsed.get("daily_plan"), list):
        raise ImportValidationError("Invalid save code: missing the resource library or task records.")
    review_queue = parsed.get("review_queue")
    if review_queue is not None and not isinstance(review_queue, list):
        raise ImportValidationError("Invalid save code: review queue must be a list.")
    _check_entries(parsed)

    try:
        return state_from_dict(parsed)
    except (TypeError, KeyError, AttributeError) as e:
        raise ImportValidationError(f"Invalid save code: {e}")


def summarize_import(state: AppState) -> dict:
    """Counts shown to the user before they confirm an overwrite."""
    return {
        "resources": len(state.resources),
        "tasks": len(state.daily_plan),
        "review_items": len(state.review_queue),
        "completed_items": sum(m.completed_items for r in state.resources for m in r.modules),
    }


def read_import_file(file_path: str) -> AppState:
    return parse_import(Path(file_path).read_text(encoding="utf-8"))


def write_export_file(state: AppState, file_path: str) -> dict:
    text = export_state(state)
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return {"filename": path.name, "length": len(text)}
