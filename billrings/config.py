"""Environment-driven settings for the entry points."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TOP_N = 5
DEFAULT_SPLIT_NUMBER = 5
DEFAULT_CURRENCY = "¥"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Knobs shared by the scripts and the Streamlit shell."""

    top_n: int = DEFAULT_TOP_N
    split_number: int = DEFAULT_SPLIT_NUMBER
    strict_header: bool = True
    currency: str = DEFAULT_CURRENCY
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = int(raw)
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def load_settings() -> Settings:
    """Read ``BILLRINGS_*`` environment variables into :class:`Settings`."""

    return Settings(
        top_n=_env_int("BILLRINGS_TOP_N", DEFAULT_TOP_N),
        split_number=_env_int("BILLRINGS_SPLIT_NUMBER", DEFAULT_SPLIT_NUMBER),
        strict_header=_env_bool("BILLRINGS_STRICT_HEADER", True),
        currency=os.getenv("BILLRINGS_CURRENCY", DEFAULT_CURRENCY),
        log_level=os.getenv("BILLRINGS_LOG_LEVEL", "INFO"),
    )
