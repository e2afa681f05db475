from __future__ import annotations
from collections import defaultdict
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Mapping, Optional
import logging
import threading

from roi_tracker.domain.parsing import indicator_to_dict, project_to_dict
from roi_tracker.domain.types import Indicator, Project
from roi_tracker.indicators.economics import IndicatorStats, calculate_indicator_stats
from roi_tracker.portfolio.distribution import calculate_distribution_by_type
from roi_tracker.portfolio.history import calculate_economy_history
from roi_tracker.portfolio.kpi import calculate_kpi_stats
from roi_tracker.projects.roi import ProjectROI, project_metrics, recalculate
from roi_tracker.store.base import NotFoundError, Store

logger = logging.getLogger(__name__)

COST_FIELDS = ("implementation_cost", "monthly_maintenance_cost")
# written only by the ROI refresh, or assigned by the store
DERIVED_FIELDS = ("roi_percentage", "total_economy_annual", "id")


class RoiService:
    """Fetch -> compute -> persist wiring around the pure calculators.

    Writes to one project's indicator set and the ROI refresh that follows
    run under that project's lock, so the cached ROI always reflects the
    last completed write.
    """

    def __init__(self, store: Store, frequency_overrides: Optional[Mapping[str, float]] = None,
                 retention_days: int = 90):
        self.store = store
        self.frequency_overrides = frequency_overrides
        self.retention_days = retention_days
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _project_lock(self, project_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[project_id]

    def _require_project(self, project_id: str) -> Project:
        p = self.store.get_project(project_id)
        if p is None:
            raise NotFoundError(project_id)
        return p

    def _require_indicator(self, indicator_id: str) -> Indicator:
        ind = self.store.get_indicator(indicator_id)
        if ind is None:
            raise NotFoundError(indicator_id)
        return ind

    # ROI refresh

    def _refresh(self, project_id: str) -> Project:
        project = self._require_project(project_id)
        indicators = self.store.list_active_indicators(project_id)
        roi: ProjectROI = recalculate(project, indicators, self.frequency_overrides)
        logger.info(
            "project %s roi=%.2f%% economy=%.2f from %d indicators",
            project_id, roi.roi_percentage, roi.total_economy_annual, len(indicators),
        )
        return self.store.save_project(project_id, asdict(roi))

    def refresh_project_roi(self, project_id: str) -> Project:
        with self._project_lock(project_id):
            return self._refresh(project_id)

    # projects

    def create_project(self, data: Dict[str, Any]) -> Project:
        return self.store.create_project({k: v for k, v in data.items() if k not in DERIVED_FIELDS})

    def update_project(self, project_id: str, updates: Dict[str, Any]) -> Project:
        """Save project fields; cost changes trigger an ROI refresh."""
        with self._project_lock(project_id):
            clean = {k: v for k, v in updates.items() if k not in DERIVED_FIELDS}
            updated = self.store.save_project(project_id, clean)
            if any(k in clean for k in COST_FIELDS):
                updated = self._refresh(project_id)
            return updated

    def delete_project(self, project_id: str) -> None:
        with self._project_lock(project_id):
            self.store.delete_project(project_id)
        with self._locks_guard:
            self._locks.pop(project_id, None)

    # indicators

    def create_indicator(self, project_id: str, data: Dict[str, Any]) -> Indicator:
        with self._project_lock(project_id):
            self._require_project(project_id)
            ind = self.store.create_indicator(project_id, data)
            self._refresh(project_id)
            return ind

    def update_indicator(self, indicator_id: str, updates: Dict[str, Any]) -> Indicator:
        project_id = self._require_indicator(indicator_id).project_id
        with self._project_lock(project_id):
            clean = {k: v for k, v in updates.items() if k not in ("id", "project_id")}
            ind = self.store.save_indicator(indicator_id, clean)
            self._refresh(project_id)
            return ind

    def delete_indicator(self, indicator_id: str) -> Indicator:
        project_id = self._require_indicator(indicator_id).project_id
        with self._project_lock(project_id):
            ind = self.store.delete_indicator(indicator_id)
            self._refresh(project_id)
            return ind

    def indicator_stats(self, indicator_id: str) -> IndicatorStats:
        return calculate_indicator_stats(self._require_indicator(indicator_id), self.frequency_overrides)

    def project_summary(self, project_id: str) -> Dict[str, Any]:
        project = self._require_project(project_id)
        indicators = self.store.list_active_indicators(project_id)
        return {
            "project": project_to_dict(project),
            "metrics": asdict(project_metrics(project, indicators, self.frequency_overrides)),
        }

    # portfolio

    def dashboard(self, organization_id: Optional[str] = None, today: Optional[date] = None) -> Dict[str, Any]:
        projects = self.store.list_projects(organization_id)
        indicators: List[Indicator] = []
        for p in projects:
            try:
                indicators.extend(self.store.list_active_indicators(p.id))
            except Exception:
                # one unreadable project must not blank the whole dashboard
                logger.exception("failed to load indicators for project %s", p.id)

        ov = self.frequency_overrides
        return {
            "stats": calculate_kpi_stats(projects, indicators, ov),
            "economy_history": calculate_economy_history(projects, indicators, ov, today=today),
            "distribution_by_type": calculate_distribution_by_type(indicators, ov),
            "projects": [project_to_dict(p) for p in projects],
            "indicators": [indicator_to_dict(i) for i in indicators],
        }

    def purge_inactive_indicators(self) -> Dict[str, Any]:
        return self.store.purge_inactive_indicators(self.retention_days)
