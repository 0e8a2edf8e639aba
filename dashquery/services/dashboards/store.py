from sqlalchemy import select

from dashquery.database import SQLStore
from dashquery.errors import DashboardNotFoundError
from dashquery.models.dashboard import Dashboard


class DashboardStore:
    """Read-only access to dashboard rows."""

    def __init__(self, store: SQLStore):
        self.store = store

    def get_dashboard(self, org_id: int, uid: str) -> Dashboard:
        with self.store.with_session() as session:
            dashboard = session.execute(
                select(Dashboard).where(Dashboard.org_id == org_id, Dashboard.uid == uid)
            ).scalar_one_or_none()

        if dashboard is None:
            raise DashboardNotFoundError()
        return dashboard
