import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_KEY_PREFIX = "pinned:"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_RAW_URL = "https://raw.githubusercontent.com"


@dataclass
class Settings:
    database_url: Optional[str] = None
    key_prefix: str = DEFAULT_KEY_PREFIX
    pin_service_url: str = "http://localhost:8000"
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_raw_url: str = DEFAULT_GITHUB_RAW_URL
    http_timeout_seconds: float = 10.0
    log_level: str = "INFO"


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        key_prefix=os.getenv("KV_KEY_PREFIX", DEFAULT_KEY_PREFIX),
        pin_service_url=os.getenv("PIN_SERVICE_URL", "http://localhost:8000").rstrip("/"),
        github_api_url=os.getenv("GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/"),
        github_raw_url=os.getenv("GITHUB_RAW_URL", DEFAULT_GITHUB_RAW_URL).rstrip("/"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
