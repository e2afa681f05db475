from __future__ import annotations
from dataclasses import dataclass, field, fields
from enum import Enum
import math
from typing import List, Optional, Union


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DevelopmentType(str, Enum):
    CHATBOT = "chatbot"
    COPILOT = "copilot"
    AUTOMATION_N8N = "automation_n8n"
    AUTOMATION_RPA = "automation_rpa"
    INTEGRATION = "integration"
    DASHBOARD = "dashboard"
    ML_MODEL = "ml_model"
    NLP_ANALYSIS = "nlp_analysis"
    DOCUMENT_PROCESSING = "document_processing"
    OTHER = "other"


class ImprovementType(str, Enum):
    PRODUCTIVITY = "productivity"
    REVENUE_INCREASE = "revenue_increase"
    MARGIN_IMPROVEMENT = "margin_improvement"
    ANALYTICAL_CAPACITY = "analytical_capacity"
    RISK_REDUCTION = "risk_reduction"
    DECISION_QUALITY = "decision_quality"
    SPEED = "speed"
    SATISFACTION = "satisfaction"
    RELATED_COSTS = "related_costs"
    CUSTOM = "custom"
    OTHER = "other"


class FrequencyUnit(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


# Models whose cost is driven by people time; used for the hours/labor rollups
LABOR_MODELS = (
    ImprovementType.PRODUCTIVITY,
    ImprovementType.SPEED,
    ImprovementType.DECISION_QUALITY,
)


@dataclass(frozen=True)
class PersonInvolved:
    hourly_rate: float = 0.0
    minutes_spent: float = 0.0   # per execution
    frequency_quantity: float = 0.0
    frequency_unit: str = FrequencyUnit.MONTH.value
    name: str = ""
    role: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class ToolCost:
    monthly_cost: float = 0.0
    other_costs: Optional[float] = None
    # only read by the RELATED_COSTS model
    frequency_quantity: Optional[float] = None
    frequency_unit: Optional[str] = None
    name: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class IndicatorData:
    """One side (baseline or post-IA) of an indicator measurement.

    Every scalar is optional: ``None`` means "not applicable to this model"
    and is read as 0 by the calculators.
    """
    people: List[PersonInvolved] = field(default_factory=list)
    tools: List[ToolCost] = field(default_factory=list)
    value: Optional[float] = None
    revenue: Optional[float] = None
    cost: Optional[float] = None
    probability: Optional[float] = None  # 0..100
    impact: Optional[float] = None
    mitigation_cost: Optional[float] = None
    decision_count: Optional[float] = None
    accuracy_pct: Optional[float] = None  # 0..100
    error_cost: Optional[float] = None
    score: Optional[float] = None  # NPS/CSAT
    client_count: Optional[float] = None
    value_per_client: Optional[float] = None
    churn_rate: Optional[float] = None  # 0..100


@dataclass(frozen=True)
class Indicator:
    id: str
    project_id: str
    # ImprovementType member, or the raw string when unrecognized
    improvement_type: Union[ImprovementType, str]
    baseline: IndicatorData = field(default_factory=IndicatorData)
    post_ia: IndicatorData = field(default_factory=IndicatorData)
    name: str = ""
    description: str = ""
    is_active: bool = True
    updated_at: Optional[str] = None  # ISO timestamp


@dataclass(frozen=True)
class Project:
    id: str
    organization_id: str
    name: str = ""
    description: str = ""
    status: Union[ProjectStatus, str] = ProjectStatus.PLANNING
    development_type: Union[DevelopmentType, str] = DevelopmentType.OTHER
    implementation_cost: float = 0.0      # one-time
    monthly_maintenance_cost: float = 0.0  # recurring
    roi_percentage: Optional[float] = None
    total_economy_annual: Optional[float] = None
    start_date: Optional[str] = None  # ISO date YYYY-MM-DD
    go_live_date: Optional[str] = None
    end_date: Optional[str] = None
    business_area: Optional[str] = None
    sponsor: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def total_cost(self) -> float:
        """First-year cost: implementation plus twelve months of maintenance."""
        return float(self.implementation_cost) + float(self.monthly_maintenance_cost) * 12


def _require_finite(name: str, v: Optional[float]) -> None:
    if v is not None and not math.isfinite(v):
        raise ValueError(f"{name} must be a finite number")


def validate_project(p: Project) -> None:
    for name in ("implementation_cost", "monthly_maintenance_cost", "roi_percentage", "total_economy_annual"):
        _require_finite(name, getattr(p, name))
    if p.implementation_cost < 0:
        raise ValueError("implementation_cost must be non-negative")
    if p.monthly_maintenance_cost < 0:
        raise ValueError("monthly_maintenance_cost must be non-negative")


def validate_indicator(ind: Indicator) -> None:
    for side in (ind.baseline, ind.post_ia):
        for f in fields(side):
            if f.name not in ("people", "tools"):
                _require_finite(f.name, getattr(side, f.name))
        for person in side.people:
            for name in ("hourly_rate", "minutes_spent", "frequency_quantity"):
                _require_finite(name, getattr(person, name))
        for tool in side.tools:
            for name in ("monthly_cost", "other_costs", "frequency_quantity"):
                _require_finite(name, getattr(tool, name))
