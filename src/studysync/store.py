"""Application state store with a single mutation entry point."""
import copy
import logging

from studysync.config import get_db_path
from studysync.db import init_db
from studysync.models import DEFAULT_STAGE, STAGES, AppState, ValidationError
from studysync.seed import seed_all, seed_resources
from studysync.storage import load_state, save_state
from studysync.tips import TipRegistry

logger = logging.getLogger(__name__)


def set_stage(state: AppState, stage: str) -> None:
    if stage not in STAGES:
        raise ValidationError(f"Unknown study stage: {stage}")
    state.study_stage = stage


def reset_state(state: AppState) -> None:
    state.resources = seed_resources()
    state.daily_plan = []
    state.review_queue = []
    state.study_stage = DEFAULT_STAGE


class StudyStore:
    """Holds the current AppState and persists every change.

    Reducers receive a deep copy of the state and mutate it in place; the copy
    replaces the live state only once the reducer has returned and all four
    slots have been saved together.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_db_path()
        init_db(self.db_path)
        seed_all(self.db_path)
        self.state = load_state(self.db_path)
        self.tips = TipRegistry()

    def dispatch(self, action, *args, **kwargs):
        draft = copy.deepcopy(self.state)
        result = action(draft, *args, **kwargs)
        save_state(self.db_path, draft)
        self.state = draft
        self.tips.invalidate_missing({t.id for t in draft.daily_plan})
        return result

    def set_stage(self, stage: str) -> None:
        self.dispatch(set_stage, stage)

    def replace_state(self, new_state: AppState) -> None:
        """Overwrite all four slots, e.g. after an import."""
        def _replace(state):
            state.resources = new_state.resources
            state.daily_plan = new_state.daily_plan
            state.review_queue = new_state.review_queue
            state.study_stage = new_state.study_stage
        self.dispatch(_replace)

    def reset(self) -> None:
        """Forget everything and start again from the seeded resources."""
        self.dispatch(reset_state)
        logger.info("All data reset to the starter resources")
