"""YAML configuration loading and validation."""

from __future__ import annotations

import logging
import os
from datetime import time
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from rialto.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RIALTO_CONFIG"


class BookingPolicy(BaseModel):
    """Limits applied to guest bookings before the store is consulted."""

    advance_months: int = Field(default=3, ge=0)
    min_guests: int = Field(default=1, ge=1)
    max_guests: int = Field(default=20, ge=1, le=20)


class NotificationSettings(BaseModel):
    relay_url: str = "http://localhost:3001"
    notify_admin: bool = False
    timeout_seconds: float = 10.0


class SlotSeed(BaseModel):
    """Catalog entry inserted by `rialto seed-slots`."""

    time: time
    max_capacity: int = Field(gt=0)
    is_lunch: bool = False


class RestaurantConfig(BaseModel):
    """Loaded from YAML config file."""

    name: str = "Al Gobbo di Rialto"
    sender: str = "Reservations <reservations@ristorantealgobbodirialto.com>"
    inbox_email: str = "info@ristorantealgobbodirialto.com"
    admin_emails: list[str] = []  # empty = any signed-in user is staff
    booking: BookingPolicy = BookingPolicy()
    notifications: NotificationSettings = NotificationSettings()
    time_slots: list[SlotSeed] = []


def load_restaurant_config(path: str | Path) -> RestaurantConfig:
    """Load and validate the restaurant config from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a YAML mapping, got {type(data).__name__}")

    try:
        return RestaurantConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid config: {e}") from e


def resolve_config(path: str | Path | None = None) -> RestaurantConfig:
    """Config from `path`, else from $RIALTO_CONFIG, else built-in defaults."""
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return RestaurantConfig()
    return load_restaurant_config(path)


def load_dotenv(search_from: Path | None = None) -> Path | None:
    """Load a .env file into os.environ without overriding existing variables."""
    candidates = [Path.cwd() / ".env"]
    if search_from is not None:
        candidates.insert(0, search_from / ".env")

    env_path = next((p for p in candidates if p.exists()), None)
    if env_path is None:
        return None

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key, value = key.strip(), value.strip().strip("'\"")
                if key not in os.environ:
                    os.environ[key] = value
    logger.info("Loaded .env from %s", env_path)
    return env_path
