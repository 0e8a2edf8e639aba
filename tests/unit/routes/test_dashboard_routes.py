from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from dashquery.config import Settings, get_settings
from dashquery.main import app
from dashquery.errors import DashboardOrPanelIdentifierNotSetError
from dashquery.routes.dashboards import _parse_identifier, get_panel_validator
from dashquery.services.dashboards import DashboardPanelValidator, DashboardStore
from dashquery.services.query_engine import QueryEngine, register_query_engine


AUTH_HEADERS = {"X-User-Id": "1", "X-Org-Id": "1"}

QUERY_DATASOURCE_INPUT = {
    "from": "",
    "to": "",
    "queries": [
        {
            "datasource": {"type": "datasource", "uid": "grafana"},
            "queryType": "randomWalk",
            "refId": "A",
        }
    ],
}


@pytest.mark.unit
class TestQueryMetricsFromDashboard:
    """Tests for /api/dashboards/org/:orgId/uid/:dashboardUid/panels/:panelId/query."""

    @pytest.fixture
    def engine(self):
        engine = MagicMock(spec=QueryEngine)
        engine.query_data.return_value = {"results": {"A": {"frames": []}}}
        register_query_engine(engine)
        yield engine
        register_query_engine(None)

    @pytest.fixture
    def client(self, store, make_dashboard, dashboard_document, engine):
        make_dashboard(uid="1", data=dashboard_document)
        make_dashboard(uid="broken", data=None)
        app.dependency_overrides[get_panel_validator] = lambda: DashboardPanelValidator(DashboardStore(store))
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_can_query_a_valid_dashboard(self, client, engine):
        response = client.post(
            "/api/dashboards/org/1/uid/1/panels/2/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        assert response.json() == {"results": {"A": {"frames": []}}}
        engine.query_data.assert_called_once()
        _, request = engine.query_data.call_args.args
        assert request.queries[0]["refId"] == "A"

    def test_invalid_identifiers(self, client, engine):
        response = client.post(
            "/api/dashboards/org/abc/uid/1/panels/xyz/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "dashboard or panel identifier is not set",
            "message": "dashboard or panel identifier is not set",
        }
        engine.query_data.assert_not_called()

    def test_panel_id_zero(self, client, engine):
        response = client.post(
            "/api/dashboards/org/1/uid/1/panels/0/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 400
        engine.query_data.assert_not_called()

    @pytest.mark.parametrize(
        "path,status_code,message",
        [
            ("/api/dashboards/org/1/uid/missing/panels/2/query", 404, "dashboard not found"),
            ("/api/dashboards/org/1/uid/1/panels/3/query", 404, "dashboard panel not found"),
            ("/api/dashboards/org/1/uid/broken/panels/2/query", 422, "dashboard data is missing or corrupt"),
            ("/api/dashboards/org/2/uid/1/panels/2/query", 404, "dashboard not found"),
        ],
    )
    def test_validation_failures_skip_the_engine(self, client, engine, path, status_code, message):
        response = client.post(path, json=QUERY_DATASOURCE_INPUT, headers=AUTH_HEADERS)

        assert response.status_code == status_code
        assert response.json()["message"] == message
        engine.query_data.assert_not_called()

    def test_disabled_feature_returns_404(self, client, engine, tmp_path):
        app.dependency_overrides[get_settings] = lambda: Settings(
            validated_queries_enabled=False,
            log_file=tmp_path / "app.log",
        )

        response = client.post(
            "/api/dashboards/org/1/uid/1/panels/2/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 404
        engine.query_data.assert_not_called()

    def test_requires_auth(self, client):
        response = client.post("/api/dashboards/org/1/uid/1/panels/2/query", json=QUERY_DATASOURCE_INPUT)

        assert response.status_code == 401

    def test_without_registered_engine(self, client):
        register_query_engine(None)

        response = client.post(
            "/api/dashboards/org/1/uid/1/panels/2/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 503

    def test_engine_failure_returns_500(self, client, engine):
        engine.query_data.side_effect = RuntimeError("datasource down")

        response = client.post(
            "/api/dashboards/org/1/uid/1/panels/2/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Metric request error"

    def test_requires_queries(self, client):
        response = client.post(
            "/api/dashboards/org/1/uid/1/panels/2/query",
            json={"from": "", "to": "", "queries": []},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 422

    @pytest.mark.parametrize(
        "path",
        [
            "/api/dashboards/org//uid/1/panels/2/query",
            "/api/dashboards/org/1/uid//panels/2/query",
            "/api/dashboards/org/1/uid/1/panels//query",
        ],
    )
    def test_empty_identifiers_are_not_set(self, client, engine, path):
        response = client.post(path, json=QUERY_DATASOURCE_INPUT, headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json()["message"] == "dashboard or panel identifier is not set"
        engine.query_data.assert_not_called()

    @pytest.mark.parametrize("panel_id", ["+2", "%202%20", "%D9%A2", "2.0"])
    def test_non_decimal_panel_ids_are_rejected(self, client, engine, panel_id):
        response = client.post(
            f"/api/dashboards/org/1/uid/1/panels/{panel_id}/query",
            json=QUERY_DATASOURCE_INPUT,
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 400
        engine.query_data.assert_not_called()


@pytest.mark.unit
class TestParseIdentifier:
    """Tests for the strict decimal parsing of path identifiers."""

    def test_accepts_plain_digits(self):
        assert _parse_identifier("2") == 2
        assert _parse_identifier("0") == 0

    @pytest.mark.parametrize("value", ["", " 2 ", "+2", "-2", "٢", "abc"])
    def test_rejects_everything_else(self, value):
        with pytest.raises(DashboardOrPanelIdentifierNotSetError):
            _parse_identifier(value)
