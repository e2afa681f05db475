from __future__ import annotations
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import logging
import threading
import uuid

from roi_tracker.domain.parsing import (
    indicator_data_from_dict,
    indicator_from_dict,
    project_from_dict,
    enum_or_raw,
    to_number,
)
from roi_tracker.domain.types import (
    DevelopmentType,
    ImprovementType,
    Indicator,
    IndicatorData,
    Project,
    ProjectStatus,
    validate_indicator,
    validate_project,
)
from roi_tracker.store.base import NotFoundError

logger = logging.getLogger(__name__)

_PROJECT_NUMERIC = ("implementation_cost", "monthly_maintenance_cost", "roi_percentage", "total_economy_annual")
_PROJECT_TEXT = ("organization_id", "name", "description", "start_date", "go_live_date", "end_date",
                 "business_area", "sponsor")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_ts(ts: Optional[str]) -> Optional[datetime]:
    if not ts:
        return None
    try:
        dt = datetime.fromisoformat(str(ts).replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _apply_project(p: Project, partial: Dict[str, Any]) -> Project:
    changes: Dict[str, Any] = {}
    for k in _PROJECT_NUMERIC:
        if k in partial:
            v = to_number(partial[k])
            changes[k] = (v or 0.0) if k in ("implementation_cost", "monthly_maintenance_cost") else v
    for k in _PROJECT_TEXT:
        if k in partial:
            changes[k] = partial[k]
    if "status" in partial:
        changes["status"] = enum_or_raw(ProjectStatus, partial["status"], ProjectStatus.PLANNING)
    if "development_type" in partial:
        changes["development_type"] = enum_or_raw(DevelopmentType, partial["development_type"], DevelopmentType.OTHER)
    return replace(p, **changes)


def _apply_indicator(ind: Indicator, partial: Dict[str, Any]) -> Indicator:
    changes: Dict[str, Any] = {}
    for k in ("name", "description"):
        if k in partial:
            changes[k] = partial[k] or ""
    if "improvement_type" in partial:
        changes["improvement_type"] = enum_or_raw(ImprovementType, partial["improvement_type"], ImprovementType.OTHER)
    if "baseline" in partial:
        changes["baseline"] = _side(partial["baseline"])
    for k in ("postIA", "post_ia"):
        if k in partial:
            changes["post_ia"] = _side(partial[k])
    if "is_active" in partial:
        changes["is_active"] = bool(partial["is_active"])
    changes["updated_at"] = _iso(_now())
    return replace(ind, **changes)


def _side(v: Any) -> IndicatorData:
    return v if isinstance(v, IndicatorData) else indicator_data_from_dict(v)


class InMemoryStore:
    """Thread-safe in-process store for projects and their indicators."""

    def __init__(self):
        self._projects: Dict[str, Project] = {}
        self._indicators: Dict[str, Indicator] = {}
        self._lock = threading.Lock()

    # projects

    def create_project(self, data: Dict[str, Any]) -> Project:
        row = dict(data)
        row["id"] = row.get("id") or f"p_{uuid.uuid4().hex[:8]}"
        row.setdefault("created_at", _iso(_now()))
        p = project_from_dict(row)
        validate_project(p)
        with self._lock:
            self._projects[p.id] = p
        logger.info("created project %s", p.id)
        return p

    def list_projects(self, organization_id: Optional[str] = None) -> List[Project]:
        with self._lock:
            rows = list(self._projects.values())
        if organization_id:
            rows = [p for p in rows if p.organization_id == organization_id]
        # newest first
        return sorted(rows, key=lambda p: p.created_at or "", reverse=True)

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            return self._projects.get(project_id)

    def save_project(self, project_id: str, partial: Dict[str, Any]) -> Project:
        with self._lock:
            p = self._projects.get(project_id)
            if p is None:
                raise NotFoundError(project_id)
            updated = _apply_project(p, partial)
            validate_project(updated)
            self._projects[project_id] = updated
        return updated

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            if self._projects.pop(project_id, None) is None:
                raise NotFoundError(project_id)
            owned = [i for i, ind in self._indicators.items() if ind.project_id == project_id]
            for i in owned:
                del self._indicators[i]
        logger.info("deleted project %s with %d indicators", project_id, len(owned))

    # indicators

    def create_indicator(self, project_id: str, data: Dict[str, Any]) -> Indicator:
        row = dict(data)
        row["id"] = row.get("id") or f"i_{uuid.uuid4().hex[:8]}"
        row["project_id"] = project_id
        row.setdefault("is_active", True)
        row["updated_at"] = _iso(_now())
        ind = indicator_from_dict(row)
        validate_indicator(ind)
        with self._lock:
            if project_id not in self._projects:
                raise NotFoundError(project_id)
            self._indicators[ind.id] = ind
        return ind

    def get_indicator(self, indicator_id: str) -> Optional[Indicator]:
        with self._lock:
            return self._indicators.get(indicator_id)

    def list_indicators(self, project_id: Optional[str] = None, include_inactive: bool = False) -> List[Indicator]:
        with self._lock:
            rows = list(self._indicators.values())
        return [
            i for i in rows
            if (project_id is None or i.project_id == project_id) and (include_inactive or i.is_active)
        ]

    def list_active_indicators(self, project_id: str) -> List[Indicator]:
        return self.list_indicators(project_id)

    def save_indicator(self, indicator_id: str, partial: Dict[str, Any]) -> Indicator:
        with self._lock:
            ind = self._indicators.get(indicator_id)
            if ind is None:
                raise NotFoundError(indicator_id)
            updated = _apply_indicator(ind, partial)
            validate_indicator(updated)
            self._indicators[indicator_id] = updated
        return updated

    def delete_indicator(self, indicator_id: str) -> Indicator:
        """Soft delete: the indicator stays stored but drops out of every aggregate."""
        return self.save_indicator(indicator_id, {"is_active": False})

    def purge_inactive_indicators(self, retention_days: int = 90, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Hard-delete indicators that have been inactive longer than ``retention_days``."""
        cutoff = (now or _now()) - timedelta(days=retention_days)
        with self._lock:
            ids = []
            for i, ind in self._indicators.items():
                ts = _parse_ts(ind.updated_at)
                if not ind.is_active and ts is not None and ts < cutoff:
                    ids.append(i)
            for i in ids:
                del self._indicators[i]
        logger.info("purged %d inactive indicators older than %s", len(ids), _iso(cutoff))
        return {
            "deleted_count": len(ids),
            "deleted_ids": ids,
            "retention_days": retention_days,
            "cutoff_date": _iso(cutoff),
        }
