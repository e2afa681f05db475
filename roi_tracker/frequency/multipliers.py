from __future__ import annotations
from typing import Dict, Mapping, Optional

from roi_tracker.domain.types import FrequencyUnit

# Executions per year for frequency_quantity=1 (business calendar: 5-day week, 8h day).
ANNUAL_MULTIPLIERS: Dict[str, float] = {
    FrequencyUnit.HOUR: 2080,
    FrequencyUnit.DAY: 260,
    FrequencyUnit.WEEK: 52,
    FrequencyUnit.MONTH: 12,
    FrequencyUnit.QUARTER: 4,
    FrequencyUnit.YEAR: 1,
}

# Executions per month (calendar approximation). Only used for monthly cost rollups.
# Not the reciprocal of ANNUAL_MULTIPLIERS; keep both tables as they are.
MONTHLY_MULTIPLIERS: Dict[str, float] = {
    FrequencyUnit.HOUR: 24 * 30,
    FrequencyUnit.DAY: 30,
    FrequencyUnit.WEEK: 4.33,
    FrequencyUnit.MONTH: 1,
    FrequencyUnit.QUARTER: 1 / 3,
    FrequencyUnit.YEAR: 1 / 12,
}


def annual_multiplier(unit: str, overrides: Optional[Mapping[str, float]] = None) -> float:
    """Executions per year for one unit of ``unit``.

    ``overrides`` (unit -> multiplier) wins per unit over the built-in table.
    Unknown units count as once a year.
    """
    if overrides and unit in overrides and overrides[unit] is not None:
        return float(overrides[unit])
    return float(ANNUAL_MULTIPLIERS.get(unit, 1))


def monthly_multiplier(unit: str) -> float:
    return float(MONTHLY_MULTIPLIERS.get(unit, 1))


def annual_frequency(quantity: float, unit: str, overrides: Optional[Mapping[str, float]] = None) -> float:
    return float(quantity or 0) * annual_multiplier(unit, overrides)


def monthly_frequency(quantity: float, unit: str) -> float:
    return float(quantity or 0) * monthly_multiplier(unit)
