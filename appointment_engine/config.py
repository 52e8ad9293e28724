"""
Centralized configuration with environment variable overrides.

Holds the engine-wide defaults (slot granularity, advance-booking
windows, shift limits, retry policy). Per-owner values are never read
from here during scheduling math: an ``OwnerConfig`` is built from these
defaults once and then threaded explicitly through every call.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from appointment_engine.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

ASSIGNMENT_MODES = ("shared_resource", "per_service")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (true/false, yes/no, 1/0) from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class SchedulingDefaults:
    """Owner-level scheduling defaults applied when an owner sets none."""

    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "10")
    min_advance_hours: float = _safe_float("MIN_ADVANCE_HOURS", "2")
    max_advance_days: float = _safe_float("MAX_ADVANCE_DAYS", "90")
    requires_approval: bool = _safe_bool("REQUIRES_APPROVAL", "false")
    timezone: str = os.getenv("DEFAULT_TIMEZONE", "America/Sao_Paulo")
    assignment_mode: str = os.getenv("ASSIGNMENT_MODE", "shared_resource")


@dataclass(frozen=True)
class ShiftLimits:
    """Bounds on a single working window (shift) length."""

    min_shift_minutes: int = _safe_int("MIN_SHIFT_MINUTES", "120")
    max_shift_minutes: int = _safe_int("MAX_SHIFT_MINUTES", "720")


@dataclass(frozen=True)
class RetryConfig:
    """Bounded retry policy for bookings rejected by the storage constraint."""

    max_attempts: int = _safe_int("BOOKING_MAX_ATTEMPTS", "3")
    base_delay_sec: float = _safe_float("BOOKING_RETRY_BASE_DELAY", "0.05")
    max_delay_sec: float = _safe_float("BOOKING_RETRY_MAX_DELAY", "1.0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingDefaults = field(default_factory=SchedulingDefaults)
    shifts: ShiftLimits = field(default_factory=ShiftLimits)
    retry: RetryConfig = field(default_factory=RetryConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    engine_name: str = os.getenv("ENGINE_NAME", "appointment-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 1 <= config.scheduling.slot_granularity_minutes <= 240:
        raise ValueError(
            "SLOT_GRANULARITY_MINUTES must be between 1 and 240, "
            f"got {config.scheduling.slot_granularity_minutes}"
        )
    if config.scheduling.min_advance_hours < 0:
        raise ValueError(
            f"MIN_ADVANCE_HOURS must be >= 0, got {config.scheduling.min_advance_hours}"
        )
    if config.scheduling.max_advance_days <= 0:
        raise ValueError(
            f"MAX_ADVANCE_DAYS must be > 0, got {config.scheduling.max_advance_days}"
        )
    if config.scheduling.min_advance_hours > config.scheduling.max_advance_days * 24:
        raise ValueError("MIN_ADVANCE_HOURS cannot exceed MAX_ADVANCE_DAYS")
    if config.scheduling.assignment_mode not in ASSIGNMENT_MODES:
        raise ValueError(
            f"ASSIGNMENT_MODE must be one of {ASSIGNMENT_MODES}, "
            f"got {config.scheduling.assignment_mode!r}"
        )
    if config.shifts.min_shift_minutes < 1:
        raise ValueError(
            f"MIN_SHIFT_MINUTES must be >= 1, got {config.shifts.min_shift_minutes}"
        )
    if config.shifts.max_shift_minutes < config.shifts.min_shift_minutes:
        raise ValueError(
            "MAX_SHIFT_MINUTES must be >= MIN_SHIFT_MINUTES, "
            f"got {config.shifts.max_shift_minutes}"
        )
    if config.retry.max_attempts < 1:
        raise ValueError(
            f"BOOKING_MAX_ATTEMPTS must be >= 1, got {config.retry.max_attempts}"
        )
    if config.retry.base_delay_sec < 0 or config.retry.max_delay_sec < 0:
        raise ValueError("BOOKING_RETRY delays must be >= 0")


def configure_logging(level: str) -> None:
    """Install the root handler; records carry the request correlation id."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
    )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level)
    logger.info(
        "Configuration loaded for '%s' (granularity=%d min, mode=%s)",
        config.engine_name,
        config.scheduling.slot_granularity_minutes,
        config.scheduling.assignment_mode,
    )
    return config


# Singleton instance
settings = load_config()
