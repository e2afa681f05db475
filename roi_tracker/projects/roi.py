from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from roi_tracker.domain.types import Indicator, Project
from roi_tracker.indicators.economics import sum_monthly_economy

Overrides = Optional[Mapping[str, float]]


@dataclass(frozen=True)
class ProjectROI:
    total_economy_annual: float
    roi_percentage: float


@dataclass(frozen=True)
class ProjectMetrics:
    monthly_economy: float
    annual_economy: float
    total_cost: float
    roi_percentage: float
    payback_months: float  # 0 when the project does not pay back


def total_cost(project: Project) -> float:
    return project.total_cost


def recalculate(project: Project, indicators: Iterable[Indicator], overrides: Overrides = None) -> ProjectROI:
    """Derive a project's cached ROI fields from its indicators.

    Every indicator passed in is counted; the caller hands over the project's
    active set. ROI is 0 when the project has no cost.
    """
    annual = 12 * sum_monthly_economy(indicators, overrides)
    cost = total_cost(project)
    roi = (annual - cost) / cost * 100 if cost > 0 else 0.0
    return ProjectROI(total_economy_annual=annual, roi_percentage=roi)


def project_metrics(project: Project, indicators: Iterable[Indicator], overrides: Overrides = None) -> ProjectMetrics:
    indicators = list(indicators)
    monthly = sum_monthly_economy(indicators, overrides)
    r = recalculate(project, indicators, overrides)
    payback = project.implementation_cost / monthly if monthly > 0 else 0.0
    return ProjectMetrics(
        monthly_economy=monthly,
        annual_economy=r.total_economy_annual,
        total_cost=total_cost(project),
        roi_percentage=r.roi_percentage,
        payback_months=payback,
    )
