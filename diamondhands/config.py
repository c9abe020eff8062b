"""
Configuration - Environment-driven settings.

Environment switches:
    DIAMONDHANDS_ENV=development / production
    DIAMONDHANDS_LOG_LEVEL=DEBUG / INFO / WARNING / ERROR
    DIAMONDHANDS_TOTAL_ROUNDS=5
    DIAMONDHANDS_PUBLISH_DEBOUNCE=1.5     seconds of quiet before a publish
    DIAMONDHANDS_POLL_INTERVAL=3.0        seconds between watcher reads
    ALLOWED_ORIGINS=*                     comma separated, for the API CORS
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os

LOG_LEVEL = os.getenv("DIAMONDHANDS_LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "INFO"
    total_rounds: int = 5
    publish_debounce: float = 1.5
    poll_interval: float = 3.0
    allowed_origins: tuple[str, ...] = ("*",)


def get_settings() -> Settings:
    """Read settings from the environment."""
    return Settings(
        env=os.getenv("DIAMONDHANDS_ENV", "development"),
        log_level=os.getenv("DIAMONDHANDS_LOG_LEVEL", "INFO").upper(),
        total_rounds=int(os.getenv("DIAMONDHANDS_TOTAL_ROUNDS", "5")),
        publish_debounce=float(os.getenv("DIAMONDHANDS_PUBLISH_DEBOUNCE", "1.5")),
        poll_interval=float(os.getenv("DIAMONDHANDS_POLL_INTERVAL", "3.0")),
        allowed_origins=tuple(os.getenv("ALLOWED_ORIGINS", "*").split(",")),
    )


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Call once at program start (cli and API entry points)."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
