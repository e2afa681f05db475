from __future__ import annotations
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from roi_tracker.domain.types import FrequencyUnit

_UNITS = {u.value for u in FrequencyUnit}


def parse_frequency_overrides(raw: Any) -> Optional[Dict[str, float]]:
    """Validate a unit -> annual multiplier mapping (JSON text or dict).

    Empty input means "use the defaults" and returns None.
    """
    if raw is None or raw == "" or raw == {}:
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"frequency multipliers must be a JSON object: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError("frequency multipliers must be a mapping of unit to number")
    out: Dict[str, float] = {}
    for unit, value in raw.items():
        key = str(unit).lower()
        if key not in _UNITS:
            raise ValueError(f"unknown frequency unit: {unit}")
        if isinstance(value, bool):
            raise ValueError(f"multiplier for {unit} must be a number")
        try:
            num = float(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"multiplier for {unit} must be a number") from e
        if num < 0:
            raise ValueError(f"multiplier for {unit} must be non-negative")
        out[key] = num
    return out or None


@dataclass(frozen=True)
class EngineConfig:
    frequency_overrides: Optional[Dict[str, float]] = None


def get_engine_config() -> EngineConfig:
    return EngineConfig(frequency_overrides=parse_frequency_overrides(os.getenv("ROI_FREQUENCY_MULTIPLIERS")))


@dataclass(frozen=True)
class StoreConfig:
    inactive_retention_days: int = 90


def get_store_config() -> StoreConfig:
    days = int(os.getenv("INDICATOR_RETENTION_DAYS", "90"))
    if days < 0:
        raise ValueError("INDICATOR_RETENTION_DAYS must be non-negative")
    return StoreConfig(inactive_retention_days=days)


@dataclass(frozen=True)
class ApiConfig:
    default_organization_id: str = "default"


def get_api_config() -> ApiConfig:
    return ApiConfig(default_organization_id=os.getenv("DEFAULT_ORGANIZATION_ID", "default"))
