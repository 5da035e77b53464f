from __future__ import annotations
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env variables from the project root (optional)
load_dotenv()

APP_DIR = Path(__file__).resolve().parent


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration shared across environments."""
    DB_PATH = Path(os.getenv("CAREDESK_DB_PATH", str(APP_DIR / "caredesk.db")))
    SQL_ECHO = _flag("CAREDESK_SQL_ECHO")  # turn on only when debugging SQL
    USER_EMAIL = os.getenv("CAREDESK_USER_EMAIL", "staff@caredesk.local")
    USER_NAME = os.getenv("CAREDESK_USER_NAME", "Front desk")
    LOG_DIR = Path(os.getenv("CAREDESK_LOG_DIR", str(APP_DIR / "logs")))
    LOG_LEVEL = os.getenv("CAREDESK_LOG_LEVEL", "INFO")
    LOG_TO_FILE = True


class DevConfig(Config):
    """Local desktop configuration"""
    LOG_LEVEL = os.getenv("CAREDESK_LOG_LEVEL", "DEBUG")


class TestConfig(Config):
    """Throwaway store, console logging only"""
    DB_PATH = Path(":memory:")
    LOG_TO_FILE = False


def get_config() -> type[Config]:
    env = os.getenv("CAREDESK_ENV", "").lower()
    if env == "test":
        return TestConfig
    if env in ("dev", "development"):
        return DevConfig
    return Config
