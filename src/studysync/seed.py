"""Built-in starter resources used on first run and after a reset."""
import json
from pathlib import Path

from studysync.db import get_connection
from studysync.models import AppState, resource_from_dict

CONTENT_DIR = Path(__file__).parent / "content"


def seed_resources() -> list:
    """Return fresh copies of the seeded resources from resources.json."""
    data = json.loads((CONTENT_DIR / "resources.json").read_text(encoding="utf-8"))
    return [resource_from_dict(r) for r in data["resources"]]


def is_seeded(db_path: str) -> bool:
    """Check whether the resources slot has ever been written."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM slots WHERE key = 'resources'").fetchone()[0]
    conn.close()
    return count > 0


def seed_all(db_path: str) -> None:
    """Write the starter state unless something is already stored."""
    if is_seeded(db_path):
        return
    from studysync.storage import save_state

    save_state(db_path, AppState(resources=seed_resources()))
