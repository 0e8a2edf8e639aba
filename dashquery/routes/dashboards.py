import re

from fastapi import APIRouter, Depends, HTTPException, status

from dashquery.config import Settings, get_settings
from dashquery.core import logger
from dashquery.database import SQLStore, get_sql_store
from dashquery.errors import DashQueryError, DashboardOrPanelIdentifierNotSetError
from dashquery.routes.auth import require_auth
from dashquery.services.auth import SignedInUser
from dashquery.services.dashboards import DashboardPanelValidator, DashboardStore
from dashquery.services.query_engine import (
    MetricRequest,
    QueryEngineUnavailableError,
    get_query_engine,
)

router = APIRouter(prefix="/api/dashboards", tags=["dashboards"])

_IDENTIFIER = re.compile(r"[0-9]+")


def get_panel_validator(store: SQLStore = Depends(get_sql_store)) -> DashboardPanelValidator:
    return DashboardPanelValidator(DashboardStore(store))


def _parse_identifier(value: str) -> int:
    if not _IDENTIFIER.fullmatch(value):
        raise DashboardOrPanelIdentifierNotSetError()
    return int(value)


# Path segments may be empty; those must reach validation instead of routing 404.
@router.post("/org/{org_id:path}/uid/{dashboard_uid:path}/panels/{panel_id:path}/query")
async def query_metrics_from_dashboard(
    org_id: str,
    dashboard_uid: str,
    panel_id: str,
    request: MetricRequest,
    current_user: SignedInUser = Depends(require_auth),
    settings: Settings = Depends(get_settings),
    validator: DashboardPanelValidator = Depends(get_panel_validator),
):
    """
    Run an ad-hoc query on behalf of a dashboard panel.

    The dashboard and panel are validated first; the query engine is only
    called once validation succeeds.
    """
    if not settings.validated_queries_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    try:
        validator.check_dashboard_and_panel(
            _parse_identifier(org_id),
            dashboard_uid,
            _parse_identifier(panel_id),
        )
        engine = get_query_engine()
        return engine.query_data(current_user, request)
    except DashQueryError:
        raise
    except QueryEngineUnavailableError as e:
        logger.error(f"Panel query rejected: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to query panel {panel_id} of dashboard {dashboard_uid}: {e}")
        raise HTTPException(status_code=500, detail="Metric request error")
