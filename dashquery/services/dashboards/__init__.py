from .store import DashboardStore
from .validator import DashboardPanelValidator, find_panel

__all__ = ["DashboardStore", "DashboardPanelValidator", "find_panel"]
