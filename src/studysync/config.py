"""Runtime configuration read from the environment.

Values are looked up when first needed, so a .env file loaded by the CLI
entry point can still supply them.
"""
import logging
import os
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".studysync" / "studysync.db")
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_LOG_LEVEL = "WARNING"


def get_db_path() -> str:
    return os.getenv("STUDYSYNC_DB") or DEFAULT_DB_PATH


def get_model() -> str:
    return os.getenv("STUDYSYNC_MODEL") or DEFAULT_MODEL


def clean_api_key(key: str | None) -> str:
    """Strip quotes and whitespace that sneak in from .env files."""
    if not key:
        return ""
    return key.replace('"', "").replace("'", "").strip()


def get_api_key() -> str:
    return clean_api_key(os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY"))


def configure_logging(console=None, level: str | None = None) -> None:
    """Route log records through rich so they share the CLI console."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=(level or os.getenv("STUDYSYNC_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
