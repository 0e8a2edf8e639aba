from .query_history import QueryHistory, QueryHistoryStar
from .dashboard import Dashboard

__all__ = [
    "QueryHistory", "QueryHistoryStar",
    "Dashboard",
]
