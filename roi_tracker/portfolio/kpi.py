from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional
import math

from roi_tracker.domain.types import LABOR_MODELS, Indicator, IndicatorData, Project, ProjectStatus
from roi_tracker.frequency.multipliers import annual_frequency
from roi_tracker.indicators.economics import sum_annual_economy, sum_monthly_economy

Overrides = Optional[Mapping[str, float]]


@dataclass(frozen=True)
class KPIStats:
    roi_total: float = 0.0
    economia_anual: float = 0.0
    horas_economizadas_ano: int = 0
    projetos_producao: int = 0
    projetos_concluidos: int = 0
    payback_medio: float = 0.0
    horas_baseline_ano: int = 0
    horas_posia_ano: int = 0
    custo_mo_baseline: float = 0.0
    custo_mo_posia: float = 0.0
    economia_mo: float = 0.0
    custo_ia_anual: float = 0.0
    economia_liquida: float = 0.0
    roi_calculado: float = 0.0
    payback_calculado: float = 0.0


def round_half_up(x: float, digits: int = 0):
    """Round like a dashboard would (2.5 -> 3), not banker's rounding."""
    m = 10 ** digits
    r = math.floor(x * m + 0.5) / m
    return int(r) if digits == 0 else r


def safe_div(a: float, b: float) -> float:
    return float(a) / float(b) if b else 0.0


def active_only(indicators: Iterable[Indicator]) -> List[Indicator]:
    return [i for i in indicators if i.is_active]


def indicators_by_project(indicators: Iterable[Indicator]) -> Dict[str, List[Indicator]]:
    """Active indicators grouped by project id."""
    out: Dict[str, List[Indicator]] = {}
    for ind in indicators:
        if ind.is_active:
            out.setdefault(ind.project_id, []).append(ind)
    return out


def _labor_side(ind: Indicator, baseline: bool) -> IndicatorData:
    return ind.baseline if baseline else ind.post_ia


def _annual_hours(indicators: Iterable[Indicator], baseline: bool, overrides: Overrides) -> float:
    total = 0.0
    for ind in indicators:
        if ind.improvement_type not in LABOR_MODELS:
            continue
        for p in _labor_side(ind, baseline).people:
            total += (p.minutes_spent / 60) * annual_frequency(p.frequency_quantity, p.frequency_unit, overrides)
    return total


def _annual_labor_cost(indicators: Iterable[Indicator], baseline: bool, overrides: Overrides) -> float:
    total = 0.0
    for ind in indicators:
        if ind.improvement_type not in LABOR_MODELS:
            continue
        for p in _labor_side(ind, baseline).people:
            hours = (p.minutes_spent / 60) * annual_frequency(p.frequency_quantity, p.frequency_unit, overrides)
            total += hours * p.hourly_rate
    return total


def calculate_baseline_hours_annual(indicators: Iterable[Indicator], overrides: Overrides = None) -> int:
    return round_half_up(_annual_hours(indicators, True, overrides))


def calculate_post_ia_hours_annual(indicators: Iterable[Indicator], overrides: Overrides = None) -> int:
    return round_half_up(_annual_hours(indicators, False, overrides))


def calculate_baseline_labor_cost(indicators: Iterable[Indicator], overrides: Overrides = None) -> float:
    return _annual_labor_cost(indicators, True, overrides)


def calculate_post_ia_labor_cost(indicators: Iterable[Indicator], overrides: Overrides = None) -> float:
    return _annual_labor_cost(indicators, False, overrides)


def calculate_hours_saved(indicators: Iterable[Indicator], overrides: Overrides = None) -> int:
    indicators = list(indicators)
    return calculate_baseline_hours_annual(indicators, overrides) - calculate_post_ia_hours_annual(indicators, overrides)


def per_execution_tool_cost(ind: Indicator, overrides: Overrides = None) -> float:
    """Annual cost of post-IA tools billed per execution (``other_costs``).

    There is no per-tool call frequency, so the first post-IA person's
    frequency stands in for it; without a person the cost is skipped.
    """
    people = ind.post_ia.people
    if not people:
        return 0.0
    first = people[0]
    freq = annual_frequency(first.frequency_quantity, first.frequency_unit, overrides)
    return sum(t.other_costs * freq for t in ind.post_ia.tools if t.other_costs)


def calculate_ai_cost_annual(projects: Iterable[Project], indicators: Iterable[Indicator],
                             overrides: Overrides = None) -> float:
    by_project = indicators_by_project(indicators)
    total = 0.0
    for p in projects:
        total += p.monthly_maintenance_cost * 12
        for ind in by_project.get(p.id, []):
            total += per_execution_tool_cost(ind, overrides)
    return total


def project_roi(project: Project, annual_economy: float) -> float:
    cost = project.total_cost
    return (annual_economy - cost) / cost * 100 if cost > 0 else 0.0


def calculate_kpi_stats(projects: Iterable[Project], indicators: Iterable[Indicator],
                        overrides: Overrides = None) -> KPIStats:
    """Portfolio KPIs from projects and their indicators.

    Inactive indicators are ignored. Cached project figures
    (``total_economy_annual``, ``roi_percentage``) take precedence over live
    recomputation when set and non-zero.
    """
    projects = list(projects)
    active = active_only(indicators)
    by_project = indicators_by_project(active)

    production = [p for p in projects if p.status == ProjectStatus.PRODUCTION]
    completed = [p for p in projects if p.status == ProjectStatus.COMPLETED]

    economia_anual = 0.0
    for p in projects:
        if p.total_economy_annual:
            economia_anual += p.total_economy_annual
        else:
            economia_anual += sum_annual_economy(by_project.get(p.id, []), overrides)

    # Projects with ROI <= 0 stay counted in projetos_producao but are left out of the mean.
    rois: List[float] = []
    paybacks: List[float] = []
    for p in production:
        own = by_project.get(p.id, [])
        roi = p.roi_percentage or project_roi(p, sum_annual_economy(own, overrides))
        if roi > 0:
            rois.append(roi)
        monthly = sum_monthly_economy(own, overrides)
        if monthly > 0:
            pb = p.implementation_cost / monthly
            if pb > 0:
                paybacks.append(pb)

    roi_total = safe_div(sum(rois), len(rois))
    payback_medio = safe_div(sum(paybacks), len(paybacks))

    horas_baseline = calculate_baseline_hours_annual(active, overrides)
    horas_posia = calculate_post_ia_hours_annual(active, overrides)
    custo_mo_baseline = calculate_baseline_labor_cost(active, overrides)
    custo_mo_posia = calculate_post_ia_labor_cost(active, overrides)
    economia_mo = custo_mo_baseline - custo_mo_posia
    custo_ia_anual = calculate_ai_cost_annual(projects, active, overrides)
    economia_liquida = economia_mo - custo_ia_anual

    investimento = sum(p.implementation_cost for p in projects)
    roi_calculado = (economia_liquida - investimento) / investimento * 100 if investimento > 0 else 0.0
    payback_calculado = investimento / (economia_liquida / 12) if economia_liquida > 0 else 0.0

    return KPIStats(
        roi_total=round_half_up(roi_total, 1),
        economia_anual=economia_anual,
        horas_economizadas_ano=horas_baseline - horas_posia,
        projetos_producao=len(production),
        projetos_concluidos=len(completed),
        payback_medio=round_half_up(payback_medio, 1),
        horas_baseline_ano=horas_baseline,
        horas_posia_ano=horas_posia,
        custo_mo_baseline=custo_mo_baseline,
        custo_mo_posia=custo_mo_posia,
        economia_mo=economia_mo,
        custo_ia_anual=custo_ia_anual,
        economia_liquida=economia_liquida,
        roi_calculado=round_half_up(roi_calculado, 2),
        payback_calculado=round_half_up(payback_calculado, 1),
    )
