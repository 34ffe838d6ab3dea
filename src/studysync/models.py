"""Data classes for the study tracker domain model."""
import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Optional

UNIT_KINDS = ("Questions", "Sections", "Articles", "Pages")

STAGE_FOUNDATION = "Foundation"
STAGE_REVIEW = "Review"  # the "strengthen" stage
STAGE_SPRINT = "Sprint"
STAGES = (STAGE_FOUNDATION, STAGE_REVIEW, STAGE_SPRINT)
DEFAULT_STAGE = STAGE_FOUNDATION

TAG_CORE = "CoreA"
TAG_AUX = "AuxB"
TAG_SIDE = "SideC"
TAG_EXTRA = "ExtraE"
TAG_REVIEW = "ReviewR"
TAG_MANUAL = "Manual"
TAGS = (TAG_CORE, TAG_AUX, TAG_SIDE, TAG_EXTRA, TAG_REVIEW, TAG_MANUAL)


class ValidationError(ValueError):
    """User input rejected before anything was changed."""


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now().isoformat()


@dataclass
class Module:
    id: str
    name: str
    unit_kind: str = "Questions"
    total_items: int = 0
    completed_items: int = 0
    color: str = "#a78bfa"

    @property
    def is_complete(self) -> bool:
        return self.completed_items >= self.total_items


@dataclass
class Resource:
    id: str
    name: str
    description: str = ""
    modules: list = field(default_factory=list)
    is_system: bool = False


@dataclass
class DailyTask:
    id: str
    resource_id: str
    resource_name: str
    module_id: str
    module_name: str
    target_amount: int
    completed_amount: int = 0
    is_completed: bool = False
    created_at: str = ""
    tag: str = TAG_MANUAL
    note: Optional[str] = None
    source_knowledge_point: Optional[str] = None
    ai_tip: Optional[str] = None
    is_ai_loading: bool = False


@dataclass
class ReviewItem:
    id: str
    resource_id: str
    resource_name: str
    module_id: str
    module_name: str
    wrong_count: int = 0
    knowledge_point: Optional[str] = None
    created_at: str = ""


@dataclass
class AppState:
    resources: list = field(default_factory=list)
    daily_plan: list = field(default_factory=list)
    review_queue: list = field(default_factory=list)
    study_stage: str = DEFAULT_STAGE


def _known_fields(cls, data: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def module_from_dict(data: dict) -> Module:
    return Module(**_known_fields(Module, data))


def resource_from_dict(data: dict) -> Resource:
    values = _known_fields(Resource, data)
    values["modules"] = [module_from_dict(m) for m in data.get("modules", [])]
    return Resource(**values)


def task_from_dict(data: dict) -> DailyTask:
    return DailyTask(**_known_fields(DailyTask, data))


def review_item_from_dict(data: dict) -> ReviewItem:
    return ReviewItem(**_known_fields(ReviewItem, data))


def state_to_dict(state: AppState) -> dict:
    return asdict(state)


def state_from_dict(data: dict) -> AppState:
    """Build an AppState; missing optional slots get their defaults."""
    stage = data.get("study_stage") or DEFAULT_STAGE
    return AppState(
        resources=[resource_from_dict(r) for r in data["resources"]],
        daily_plan=[task_from_dict(t) for t in data["daily_plan"]],
        review_queue=[review_item_from_dict(i) for i in data.get("review_queue") or []],
        study_stage=stage if stage in STAGES else DEFAULT_STAGE,
    )
