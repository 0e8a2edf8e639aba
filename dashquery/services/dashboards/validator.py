from typing import Any, Mapping, Optional

from dashquery.core import logger
from dashquery.errors import (
    DashboardCorruptError,
    DashboardOrPanelIdentifierNotSetError,
    DashboardPanelNotFoundError,
)
from dashquery.services.dashboards.store import DashboardStore


class DashboardPanelValidator:
    """Gate for panel-scoped ad-hoc queries.

    A query may only be forwarded to the query engine when the dashboard
    exists in the caller's org and its document contains the panel.
    """

    def __init__(self, dashboards: DashboardStore):
        self.dashboards = dashboards

    def check_dashboard_and_panel(self, org_id: int, dashboard_uid: str, panel_id: int) -> None:
        """
        Validate that ``panel_id`` belongs to dashboard ``dashboard_uid``.

        Raises:
            DashboardOrPanelIdentifierNotSetError: identifiers missing, checked before any lookup
            DashboardNotFoundError: propagated from the dashboard store
            DashboardCorruptError: the dashboard row carries no document
            DashboardPanelNotFoundError: no panel with that id in the document
        """
        if not dashboard_uid or panel_id is None or panel_id <= 0:
            raise DashboardOrPanelIdentifierNotSetError()

        dashboard = self.dashboards.get_dashboard(org_id, dashboard_uid)

        document = dashboard.data
        if document is None or not isinstance(document, Mapping):
            logger.error(f"Dashboard {dashboard_uid} in org {org_id} has no valid document")
            raise DashboardCorruptError()

        if find_panel(document, panel_id) is None:
            raise DashboardPanelNotFoundError()


def find_panel(document: Mapping[str, Any], panel_id: int) -> Optional[Mapping[str, Any]]:
    """Return the top-level panel whose integer id equals ``panel_id``."""
    panels = document.get("panels")
    if not isinstance(panels, list):
        return None

    for panel in panels:
        if not isinstance(panel, Mapping):
            continue
        candidate = panel.get("id")
        if isinstance(candidate, bool) or not isinstance(candidate, int):
            continue
        if candidate == panel_id:
            return panel
    return None
