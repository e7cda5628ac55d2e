"""
Service configuration for PI Analytics.

The two store secrets are read once at startup and passed explicitly into
the snapshot provider; nothing below the API layer reads the environment.

Usage:
    from lib.config import Settings
    settings = Settings.from_env()
"""
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from lib.errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent

SERVICE_NAME = "PI Analytics"
SERVICE_VERSION = "1.0.0"


class Settings(BaseModel):
    """Secrets for the backing store plus a few runtime knobs."""
    supabase_url: str
    supabase_key: str
    log_level: str = "INFO"
    port: int = 8001
    debug: bool = False

    @field_validator("supabase_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, env_file: Path = None) -> "Settings":
        """Build settings from the process environment (and .env, if present)."""
        load_dotenv(env_file or PROJECT_ROOT / ".env")

        url = os.environ.get("SUPABASE_URL", "")
        key = (
            os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
            or os.environ.get("SUPABASE_KEY", "")
        )
        if not url:
            raise ConfigError("SUPABASE_URL must be set", setting="SUPABASE_URL")
        if not key:
            raise ConfigError(
                "SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_KEY) must be set",
                setting="SUPABASE_KEY",
            )

        return cls(
            supabase_url=url,
            supabase_key=key,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            port=int(os.getenv("DASHBOARD_PORT", "8001")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )
