"""Runtime configuration loaded from the environment."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Default data directory (repository root /data)
DATA_DIR = Path(__file__).parent.parent.parent / "data"

DEFAULT_SECRET_KEY = "fastwell-dev-secret-key"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_RESPONSE_LANGUAGE = "Brazilian Portuguese"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Application settings.

    Values come from environment variables (and a local .env file when
    present). Everything has a default suitable for local development.
    """

    data_dir: Path = field(default_factory=lambda: DATA_DIR)
    secret_key: str = DEFAULT_SECRET_KEY
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 12
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    response_language: str = DEFAULT_RESPONSE_LANGUAGE
    meal_plan_daily_limit: int = 0  # 0 disables the cap
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "fastwell.db"

    @property
    def session_file(self) -> Path:
        """File where the CLI keeps the signed-in token."""
        return self.data_dir / "session.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        load_dotenv()

        data_dir = os.getenv("FASTWELL_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else DATA_DIR,
            secret_key=os.getenv("FASTWELL_SECRET_KEY", DEFAULT_SECRET_KEY),
            token_ttl_hours=_int_env("FASTWELL_TOKEN_TTL_HOURS", 24),
            bcrypt_rounds=_int_env("FASTWELL_BCRYPT_ROUNDS", 12),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            gemini_model=os.getenv("FASTWELL_GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            response_language=os.getenv("FASTWELL_RESPONSE_LANGUAGE", DEFAULT_RESPONSE_LANGUAGE),
            meal_plan_daily_limit=_int_env("FASTWELL_MEAL_PLAN_DAILY_LIMIT", 0),
            log_level=os.getenv("FASTWELL_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for CLI and web entry points."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
