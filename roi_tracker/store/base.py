from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol

from roi_tracker.domain.types import Indicator, Project


class NotFoundError(KeyError):
    """Raised when a project or indicator id does not exist."""


class Store(Protocol):
    """Persistence the orchestration layer needs. The calculators never use it."""

    def create_project(self, data: Dict[str, Any]) -> Project: ...

    def list_projects(self, organization_id: Optional[str] = None) -> List[Project]: ...

    def get_project(self, project_id: str) -> Optional[Project]: ...

    def save_project(self, project_id: str, partial: Dict[str, Any]) -> Project: ...

    def delete_project(self, project_id: str) -> None: ...

    def create_indicator(self, project_id: str, data: Dict[str, Any]) -> Indicator: ...

    def get_indicator(self, indicator_id: str) -> Optional[Indicator]: ...

    def list_active_indicators(self, project_id: str) -> List[Indicator]: ...

    def save_indicator(self, indicator_id: str, partial: Dict[str, Any]) -> Indicator: ...

    def delete_indicator(self, indicator_id: str) -> Indicator: ...

    def purge_inactive_indicators(self, retention_days: int = 90) -> Dict[str, Any]: ...
