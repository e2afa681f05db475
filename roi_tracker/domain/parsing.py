from __future__ import annotations
from typing import Any, Dict, Optional, Union
from enum import Enum

from roi_tracker.domain.types import (
    DevelopmentType,
    ImprovementType,
    Indicator,
    IndicatorData,
    PersonInvolved,
    Project,
    ProjectStatus,
    ToolCost,
)


def _pick(row: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in row and row[k] is not None:
            return row[k]
    return None


def to_number(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def enum_or_raw(enum_cls: type, v: Any, default: Enum) -> Union[Enum, str]:
    if v is None or v == "":
        return default
    if isinstance(v, enum_cls):
        return v
    try:
        return enum_cls(str(v).lower())
    except ValueError:
        return str(v)


def _unit(v: Any) -> Optional[str]:
    if isinstance(v, Enum):
        return v.value
    return str(v).lower() if v else None


def person_from_dict(row: Dict[str, Any]) -> PersonInvolved:
    return PersonInvolved(
        hourly_rate=to_number(_pick(row, "hourlyRate", "hourly_rate")) or 0.0,
        minutes_spent=to_number(_pick(row, "minutesSpent", "minutes_spent")) or 0.0,
        frequency_quantity=to_number(_pick(row, "frequencyQuantity", "frequency_quantity")) or 0.0,
        frequency_unit=_unit(_pick(row, "frequencyUnit", "frequency_unit")) or "month",
        name=str(row.get("name") or ""),
        role=str(row.get("role") or ""),
        id=row.get("id"),
    )


def tool_from_dict(row: Dict[str, Any]) -> ToolCost:
    return ToolCost(
        monthly_cost=to_number(_pick(row, "monthlyCost", "monthly_cost")) or 0.0,
        other_costs=to_number(_pick(row, "otherCosts", "other_costs")),
        frequency_quantity=to_number(_pick(row, "frequencyQuantity", "frequency_quantity")),
        frequency_unit=_unit(_pick(row, "frequencyUnit", "frequency_unit")),
        name=str(row.get("name") or ""),
        id=row.get("id"),
    )


# (dataclass field, accepted payload keys)
_SCALARS = (
    ("value", ("value",)),
    ("revenue", ("revenue",)),
    ("cost", ("cost",)),
    ("probability", ("probability",)),
    ("impact", ("impact",)),
    ("mitigation_cost", ("mitigationCost", "mitigation_cost")),
    ("decision_count", ("decisionCount", "decision_count")),
    ("accuracy_pct", ("accuracyPct", "accuracy_pct")),
    ("error_cost", ("errorCost", "error_cost")),
    ("score", ("score",)),
    ("client_count", ("clientCount", "client_count")),
    ("value_per_client", ("valuePerClient", "value_per_client")),
    ("churn_rate", ("churnRate", "churn_rate")),
)


def indicator_data_from_dict(row: Optional[Dict[str, Any]]) -> IndicatorData:
    row = row or {}
    scalars = {name: to_number(_pick(row, *keys)) for name, keys in _SCALARS}
    return IndicatorData(
        people=[person_from_dict(p) for p in (row.get("people") or [])],
        tools=[tool_from_dict(t) for t in (row.get("tools") or [])],
        **scalars,
    )


def indicator_from_dict(row: Dict[str, Any]) -> Indicator:
    """Build an Indicator from a store row or API payload.

    Accepts the camelCase shape (``postIA``) as well as ``post_ia``.
    Unknown improvement types are kept verbatim.
    """
    active = row.get("is_active", row.get("isActive", True))
    return Indicator(
        id=str(row.get("id") or ""),
        project_id=str(_pick(row, "project_id", "projectId") or ""),
        improvement_type=enum_or_raw(
            ImprovementType, _pick(row, "improvement_type", "improvementType"), ImprovementType.OTHER
        ),
        baseline=indicator_data_from_dict(row.get("baseline")),
        post_ia=indicator_data_from_dict(_pick(row, "postIA", "post_ia", "postIa")),
        name=str(row.get("name") or ""),
        description=str(row.get("description") or ""),
        is_active=bool(active),
        updated_at=_pick(row, "updated_at", "updatedAt"),
    )


def project_from_dict(row: Dict[str, Any]) -> Project:
    return Project(
        id=str(row.get("id") or ""),
        organization_id=str(_pick(row, "organization_id", "organizationId") or ""),
        name=str(row.get("name") or ""),
        description=str(row.get("description") or ""),
        status=enum_or_raw(ProjectStatus, row.get("status"), ProjectStatus.PLANNING),
        development_type=enum_or_raw(
            DevelopmentType, _pick(row, "development_type", "developmentType"), DevelopmentType.OTHER
        ),
        implementation_cost=to_number(_pick(row, "implementation_cost", "implementationCost")) or 0.0,
        monthly_maintenance_cost=to_number(_pick(row, "monthly_maintenance_cost", "monthlyMaintenanceCost")) or 0.0,
        roi_percentage=to_number(_pick(row, "roi_percentage", "roiPercentage")),
        total_economy_annual=to_number(_pick(row, "total_economy_annual", "totalEconomyAnnual")),
        start_date=_pick(row, "start_date", "startDate"),
        go_live_date=_pick(row, "go_live_date", "goLiveDate"),
        end_date=_pick(row, "end_date", "endDate"),
        business_area=_pick(row, "business_area", "businessArea"),
        sponsor=row.get("sponsor"),
        created_at=_pick(row, "created_at", "createdAt"),
    )


def _plain(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, list):
        return [_plain(x) for x in v]
    return v


def indicator_data_to_dict(d: IndicatorData) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "people": [
            {
                "id": p.id, "name": p.name, "role": p.role,
                "hourlyRate": p.hourly_rate, "minutesSpent": p.minutes_spent,
                "frequencyQuantity": p.frequency_quantity, "frequencyUnit": _plain(p.frequency_unit),
            }
            for p in d.people
        ],
        "tools": [
            {k: v for k, v in {
                "id": t.id, "name": t.name, "monthlyCost": t.monthly_cost, "otherCosts": t.other_costs,
                "frequencyQuantity": t.frequency_quantity, "frequencyUnit": _plain(t.frequency_unit),
            }.items() if v is not None}
            for t in d.tools
        ],
    }
    for name, keys in _SCALARS:
        v = getattr(d, name)
        if v is not None:
            out[keys[0]] = v
    return out


def indicator_to_dict(ind: Indicator) -> Dict[str, Any]:
    return {
        "id": ind.id,
        "project_id": ind.project_id,
        "name": ind.name,
        "description": ind.description,
        "improvement_type": _plain(ind.improvement_type),
        "baseline": indicator_data_to_dict(ind.baseline),
        "postIA": indicator_data_to_dict(ind.post_ia),
        "is_active": ind.is_active,
        "updated_at": ind.updated_at,
    }


def project_to_dict(p: Project) -> Dict[str, Any]:
    return {
        "id": p.id,
        "organization_id": p.organization_id,
        "name": p.name,
        "description": p.description,
        "status": _plain(p.status),
        "development_type": _plain(p.development_type),
        "implementation_cost": p.implementation_cost,
        "monthly_maintenance_cost": p.monthly_maintenance_cost,
        "roi_percentage": p.roi_percentage,
        "total_economy_annual": p.total_economy_annual,
        "start_date": p.start_date,
        "go_live_date": p.go_live_date,
        "end_date": p.end_date,
        "business_area": p.business_area,
        "sponsor": p.sponsor,
        "created_at": p.created_at,
    }
