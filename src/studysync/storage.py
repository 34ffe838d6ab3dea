"""Four-slot snapshot persistence on top of the key/value table."""
import json
import logging

from studysync.db import get_connection
from studysync.models import (
    DEFAULT_STAGE, STAGES, AppState, resource_from_dict, review_item_from_dict,
    state_to_dict, task_from_dict, now_iso,
)
from studysync.seed import seed_resources

logger = logging.getLogger(__name__)

SLOT_RESOURCES = "resources"
SLOT_DAILY_PLAN = "daily_plan"
SLOT_REVIEW_QUEUE = "review_queue"
SLOT_STUDY_STAGE = "study_stage"
SLOTS = (SLOT_RESOURCES, SLOT_DAILY_PLAN, SLOT_REVIEW_QUEUE, SLOT_STUDY_STAGE)


def read_slot(db_path: str, key: str) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM slots WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else None


def _decode(db_path: str, key: str, build, default):
    raw = read_slot(db_path, key)
    if raw is None:
        return default()
    try:
        return build(json.loads(raw))
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning("Slot %r is unreadable (%s); falling back to default", key, e)
        return default()


def _build_stage(value):
    if value not in STAGES:
        raise ValueError(f"unknown stage {value!r}")
    return value


def load_state(db_path: str) -> AppState:
    """Load all four slots, replacing missing or corrupt ones with defaults."""
    return AppState(
        resources=_decode(
            db_path, SLOT_RESOURCES,
            lambda data: [resource_from_dict(r) for r in data], seed_resources,
        ),
        daily_plan=_decode(
            db_path, SLOT_DAILY_PLAN,
            lambda data: [task_from_dict(t) for t in data], list,
        ),
        review_queue=_decode(
            db_path, SLOT_REVIEW_QUEUE,
            lambda data: [review_item_from_dict(i) for i in data], list,
        ),
        study_stage=_decode(db_path, SLOT_STUDY_STAGE, _build_stage, lambda: DEFAULT_STAGE),
    )


def save_state(db_path: str, state: AppState) -> None:
    """Write all four slots in a single transaction."""
    data = state_to_dict(state)
    updated_at = now_iso()
    conn = get_connection(db_path)
    with conn:
        for key in SLOTS:
            conn.execute(
                "INSERT INTO slots (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (key, json.dumps(data[key], ensure_ascii=False), updated_at),
            )
    conn.close()
