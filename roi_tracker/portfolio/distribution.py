from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from roi_tracker.domain.types import ImprovementType, Indicator
from roi_tracker.indicators.economics import calculate_indicator_stats
from roi_tracker.portfolio.kpi import round_half_up

# improvement type -> (display label, chart color)
IMPROVEMENT_TYPE_LABELS: Dict[str, Tuple[str, str]] = {
    ImprovementType.PRODUCTIVITY: ("Produtividade", "#4CAF50"),
    ImprovementType.REVENUE_INCREASE: ("Aumento de Receita", "#2196F3"),
    ImprovementType.MARGIN_IMPROVEMENT: ("Melhoria de Margem", "#9C27B0"),
    ImprovementType.ANALYTICAL_CAPACITY: ("Capacidade Analítica", "#FF9800"),
    ImprovementType.RISK_REDUCTION: ("Redução de Risco", "#F44336"),
    ImprovementType.DECISION_QUALITY: ("Qualidade de Decisão", "#00BCD4"),
    ImprovementType.SPEED: ("Velocidade", "#4CAF50"),
    ImprovementType.SATISFACTION: ("Satisfação", "#FFC107"),
    ImprovementType.RELATED_COSTS: ("Custos Relacionados", "#795548"),
    ImprovementType.CUSTOM: ("Personalizado", "#607D8B"),
    ImprovementType.OTHER: ("Outros", "#9E9E9E"),
}


@dataclass(frozen=True)
class DistributionItem:
    improvement_type: str
    type: str  # display label
    value: int
    color: str


def label_for(improvement_type: str) -> Tuple[str, str]:
    return IMPROVEMENT_TYPE_LABELS.get(improvement_type, IMPROVEMENT_TYPE_LABELS[ImprovementType.OTHER])


def calculate_distribution_by_type(indicators: Iterable[Indicator],
                                   overrides: Optional[Mapping[str, float]] = None) -> List[DistributionItem]:
    """Annual economy per improvement type, largest first; non-positive totals dropped."""
    totals: Dict[str, float] = {}
    for ind in indicators:
        if not ind.is_active:
            continue
        key = getattr(ind.improvement_type, "value", ind.improvement_type)
        totals[key] = totals.get(key, 0.0) + calculate_indicator_stats(ind, overrides).annual_economy

    items: List[DistributionItem] = []
    for key, total in totals.items():
        value = round_half_up(total)
        if value <= 0:
            continue
        label, color = label_for(key)
        items.append(DistributionItem(improvement_type=key, type=label, value=value, color=color))
    items.sort(key=lambda i: i.value, reverse=True)
    return items
