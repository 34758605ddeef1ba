"""Runtime settings read from the environment."""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = str(Path.home() / ".yks_tracker" / "tracker.db")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    backend: str = "memory"
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "WARNING"
    summary_days: int = 7
    due_limit: int = 15
    seed_samples: bool = True


def load_settings() -> Settings:
    """Build settings from the environment, reading a .env file if present."""
    load_dotenv()
    return Settings(
        backend=os.getenv("YKS_BACKEND", "memory"),
        db_path=os.getenv("YKS_DB_PATH", DEFAULT_DB_PATH),
        log_level=os.getenv("YKS_LOG_LEVEL", "WARNING"),
        summary_days=int(os.getenv("YKS_SUMMARY_DAYS", "7")),
        due_limit=int(os.getenv("YKS_DUE_LIMIT", "15")),
        seed_samples=_env_bool(os.getenv("YKS_SEED_SAMPLES", "true")),
    )
