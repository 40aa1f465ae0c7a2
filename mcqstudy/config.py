# mcqstudy/config.py
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# load .env if present
load_dotenv()

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        return default


@dataclass
class Settings:
    data_dir: str = field(default_factory=lambda: os.getenv("MCQ_DATA_DIR", "data"))
    logs_dir: str = field(default_factory=lambda: os.getenv("MCQ_LOGS_DIR", "logs"))
    log_level: str = field(default_factory=lambda: os.getenv("MCQ_LOG_LEVEL", "INFO").upper())
    max_upload_bytes: int = field(
        default_factory=lambda: _env_int("MCQ_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    )
    gemini_api_key: str | None = field(default_factory=lambda: os.getenv("GEMINI_API_KEY") or None)
    gemini_model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"))


def get_settings() -> Settings:
    """Read settings from the environment (and .env) at call time."""
    return Settings()
