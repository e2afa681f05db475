from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple
import logging

from roi_tracker.domain.types import ImprovementType, Indicator, IndicatorData, PersonInvolved, ToolCost
from roi_tracker.frequency.multipliers import annual_multiplier, monthly_frequency

logger = logging.getLogger(__name__)

Overrides = Optional[Mapping[str, float]]


@dataclass(frozen=True)
class IndicatorStats:
    monthly_economy: float
    annual_economy: float
    improvement_pct: str  # one decimal, or the "0"/"100" sentinels


def _n(v: Optional[float]) -> float:
    return float(v) if v else 0.0


def _pct(numerator: float, denominator: float) -> str:
    return f"{numerator / denominator * 100:.1f}"


def calc_people_cost(people: Iterable[PersonInvolved]) -> float:
    """Monthly labor cost: rate x hours per execution x executions per month."""
    total = 0.0
    for p in people or ():
        executions = monthly_frequency(p.frequency_quantity, p.frequency_unit)
        total += _n(p.hourly_rate) * (_n(p.minutes_spent) / 60) * executions
    return total


def calc_tools_cost(tools: Iterable[ToolCost]) -> float:
    return sum(_n(t.monthly_cost) + _n(t.other_costs) for t in tools or ())


def expected_error_cost(d: IndicatorData) -> float:
    return _n(d.decision_count) * (1 - _n(d.accuracy_pct) / 100) * _n(d.error_cost)


def _operating_cost(d: IndicatorData) -> float:
    return calc_people_cost(d.people) + calc_tools_cost(d.tools) + _n(d.cost)


def _cost_reduction(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    before = _operating_cost(ind.baseline)
    after = _operating_cost(ind.post_ia)
    if ind.improvement_type == ImprovementType.DECISION_QUALITY:
        before += expected_error_cost(ind.baseline)
        after += expected_error_cost(ind.post_ia)
    economy = before - after
    return economy, _pct(economy, before) if before > 0 else "0"


def _revenue_increase(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    before, after = _n(ind.baseline.revenue), _n(ind.post_ia.revenue)
    pct = f"{(after / before - 1) * 100:.1f}" if before else "100"
    return after - before, pct


def _margin_improvement(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    before = _n(ind.baseline.revenue) - _n(ind.baseline.cost)
    after = _n(ind.post_ia.revenue) - _n(ind.post_ia.cost)
    delta = after - before
    return delta, _pct(delta, abs(before)) if before != 0 else "100"


def _risk_reduction(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    b, a = ind.baseline, ind.post_ia
    risk_before = _n(b.probability) / 100 * _n(b.impact)
    risk_after = _n(a.probability) / 100 * _n(a.impact)
    economy = (risk_before - risk_after) + (_n(b.mitigation_cost) - _n(a.mitigation_cost))
    return economy, _pct(risk_before - risk_after, risk_before) if risk_before > 0 else "0"


def _churn_value(d: IndicatorData) -> float:
    return _n(d.churn_rate) / 100 * _n(d.client_count) * _n(d.value_per_client)


def _satisfaction(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    b, a = ind.baseline, ind.post_ia
    economy = (_churn_value(b) - _churn_value(a)) + (_n(a.revenue) - _n(b.revenue))
    if a.score and b.score:
        return economy, _pct(a.score - b.score, b.score)
    return economy, "0"


def related_costs_annual(tools: Iterable[ToolCost], overrides: Overrides = None) -> float:
    """Annualized spend of the listed tools, each at its own frequency (default monthly)."""
    total = 0.0
    for t in tools or ():
        qty = t.frequency_quantity or 1
        unit = t.frequency_unit or "month"
        total += _n(t.monthly_cost) * qty * annual_multiplier(unit, overrides)
    return total


def _related_costs(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    annual = related_costs_annual(ind.baseline.tools, overrides)
    return annual / 12, "100" if annual > 0 else "0"


def _value_delta(ind: Indicator, overrides: Overrides) -> Tuple[float, str]:
    before, after = _n(ind.baseline.value), _n(ind.post_ia.value)
    pct = f"{(after / before - 1) * 100:.1f}" if before else "0"
    return after - before, pct


# One entry per ImprovementType member. Types not listed here (unknown strings)
# fall back to _value_delta in calculate_indicator_stats.
MODELS: Dict[str, Callable[[Indicator, Overrides], Tuple[float, str]]] = {
    ImprovementType.PRODUCTIVITY: _cost_reduction,
    ImprovementType.SPEED: _cost_reduction,
    ImprovementType.DECISION_QUALITY: _cost_reduction,
    ImprovementType.REVENUE_INCREASE: _revenue_increase,
    ImprovementType.MARGIN_IMPROVEMENT: _margin_improvement,
    ImprovementType.RISK_REDUCTION: _risk_reduction,
    ImprovementType.SATISFACTION: _satisfaction,
    ImprovementType.RELATED_COSTS: _related_costs,
    ImprovementType.ANALYTICAL_CAPACITY: _value_delta,
    ImprovementType.CUSTOM: _value_delta,
    ImprovementType.OTHER: _value_delta,
}


def is_default_model(improvement_type: str) -> bool:
    return MODELS.get(improvement_type, _value_delta) is _value_delta


def calculate_indicator_stats(ind: Indicator, overrides: Overrides = None) -> IndicatorStats:
    """Monthly/annual economy and improvement % for one indicator.

    Dispatches on ``improvement_type``. Absent numeric fields count as 0 and
    every ratio is guarded, so this never raises for a well-formed Indicator.
    """
    model = MODELS.get(ind.improvement_type)
    if model is None:
        logger.warning(
            "indicator %s has unknown improvement_type %r; using value delta",
            ind.id, ind.improvement_type,
        )
        model = _value_delta
    monthly, pct = model(ind, overrides)
    return IndicatorStats(monthly_economy=monthly, annual_economy=monthly * 12, improvement_pct=pct)


def sum_monthly_economy(indicators: Iterable[Indicator], overrides: Overrides = None) -> float:
    return sum(calculate_indicator_stats(i, overrides).monthly_economy for i in indicators)


def sum_annual_economy(indicators: Iterable[Indicator], overrides: Overrides = None) -> float:
    return sum(calculate_indicator_stats(i, overrides).annual_economy for i in indicators)
