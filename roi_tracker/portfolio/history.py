from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from roi_tracker.domain.types import Indicator, Project, ProjectStatus
from roi_tracker.indicators.economics import sum_monthly_economy
from roi_tracker.portfolio.kpi import indicators_by_project, round_half_up

# pt-BR short month names, as the dashboards label the series
MONTH_LABELS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")

HISTORY_WINDOW = 12
FALLBACK_WINDOW = 6


@dataclass(frozen=True)
class EconomyHistoryItem:
    period: str  # YYYY-MM
    month: str
    bruta: int
    investimento: int
    liquida: int
    approximate: bool = False  # True for the synthesized flat series


def _parse_date(d: Optional[str]) -> Optional[date]:
    if not d:
        return None
    try:
        return datetime.strptime(str(d)[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def _item(year: int, month: int, bruta: float, investimento: float, approximate: bool = False) -> EconomyHistoryItem:
    return EconomyHistoryItem(
        period=f"{year:04d}-{month:02d}",
        month=MONTH_LABELS[month - 1],
        bruta=round_half_up(bruta),
        investimento=round_half_up(investimento),
        liquida=round_half_up(bruta - investimento),
        approximate=approximate,
    )


def calculate_economy_history(projects: Iterable[Project], indicators: Iterable[Indicator],
                              overrides: Optional[Mapping[str, float]] = None,
                              today: Optional[date] = None) -> List[EconomyHistoryItem]:
    """Monthly economy of production projects bucketed by go-live month.

    Each project contributes its monthly economy and maintenance cost to the
    month of ``go_live_date`` (or ``start_date``). Returns the latest
    HISTORY_WINDOW buckets in chronological order.

    When no production project can be bucketed, returns a flat trailing
    FALLBACK_WINDOW-month series that repeats the current totals, flagged
    ``approximate``. It is not real history.
    """
    production = [p for p in projects if p.status == ProjectStatus.PRODUCTION]
    by_project = indicators_by_project(indicators)

    buckets: Dict[Tuple[int, int], List[float]] = {}
    total_economy = 0.0
    total_investment = 0.0
    for p in production:
        monthly = sum_monthly_economy(by_project.get(p.id, []), overrides)
        total_economy += monthly
        total_investment += p.monthly_maintenance_cost
        ref = _parse_date(p.go_live_date) or _parse_date(p.start_date)
        if ref is None:
            continue
        b = buckets.setdefault((ref.year, ref.month), [0.0, 0.0])
        b[0] += monthly
        b[1] += p.monthly_maintenance_cost

    if buckets:
        history = [_item(y, m, b[0], b[1]) for (y, m), b in sorted(buckets.items())]
        return history[-HISTORY_WINDOW:]

    today = today or date.today()
    out: List[EconomyHistoryItem] = []
    for back in range(FALLBACK_WINDOW - 1, -1, -1):
        y, m = _shift_month(today.year, today.month, -back)
        out.append(_item(y, m, total_economy, total_investment, approximate=True))
    return out
