"""HTTP tests against the FastAPI app with an in-memory store."""

import threading
import time

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.models.report import ClassificationState
from app.models.reporter import ViewerRole
from app.services.risk_classifier import RiskClassifier

from tests.factories import CannedProvider, add_profile, add_report, risk_json

CITIZEN = {"X-Reporter-Id": "citizen-1"}
WORKER = {"X-Reporter-Id": "worker-1"}
AUTHORITY = {"X-Reporter-Id": "authority-1"}

REPORT_BODY = {
    "description": "Cholera-like symptoms in five houses, loose motion and vomiting",
    "severity": 9,
    "category": "disease",
    "location": {"latitude": 12.9, "longitude": 77.6},
}


def wait_until(predicate, timeout: float = 3.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.01)
    raise AssertionError("condition not reached in time")


@pytest.fixture
def seeded(store):
    add_profile(store, "citizen-1", ViewerRole.CITIZEN, full_name="Asha", age=34, street="Station Road", ward="4")
    add_profile(store, "worker-1", ViewerRole.FIELD_WORKER, full_name="Field Worker")
    add_profile(store, "authority-1", ViewerRole.AUTHORITY, full_name="Health Officer")
    return store


def _client(store, provider, timeout: float = 2.0) -> TestClient:
    app = create_app(store=store, classifier=RiskClassifier(provider, timeout_seconds=timeout))
    return TestClient(app)


@pytest.fixture
def client(seeded):
    with _client(seeded, CannedProvider(risk_json("Critical", confidence=0.9))) as c:
        yield c


def _classified(store, report_id: str) -> bool:
    return store.get_report(report_id).classification != ClassificationState.PENDING


class TestServiceEndpoints:
    def test_root(self, client) -> None:
        body = client.get("/").json()
        assert body["status"] == "running"
        assert body["service"] == "HealthGuard Alert Hub"

    def test_health(self, client) -> None:
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["classifier"] == "canned"
        assert body["classification_workers"] is True

    def test_database_health(self, client) -> None:
        body = client.get("/health/db").json()
        assert body["database"] == "memory"
        assert body["connected"] is True

    def test_module_app_builds_reporter_routes(self) -> None:
        from app.main import app

        paths = {route.path for route in app.routes}
        assert "/reporters/{reporter_id}" in paths
        assert "/reporters/{reporter_id}/reports" in paths

    def test_path_id_is_independent_of_caller_header(self, client) -> None:
        response = client.get("/reporters/citizen-1", headers=AUTHORITY)
        assert response.status_code == 200
        assert response.json()["reporter_id"] == "citizen-1"


class TestSubmitReport:
    def test_identity_required(self, client) -> None:
        assert client.post("/reports", json=REPORT_BODY).status_code == 401

    def test_created(self, client, seeded) -> None:
        response = client.post("/reports", json=REPORT_BODY, headers=CITIZEN)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "active"
        assert seeded.get_report(body["report_id"]).reporter_id == "citizen-1"

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"severity": 11}, "severity"),
            ({"severity": "9"}, "severity"),
            ({"category": "flood"}, "category"),
            ({"description": "  "}, "description"),
            ({"location": {"latitude": 95, "longitude": 77.6}}, "location.latitude"),
        ],
    )
    def test_invalid_body(self, client, seeded, overrides: dict, field: str) -> None:
        response = client.post("/reports", json={**REPORT_BODY, **overrides}, headers=CITIZEN)

        assert response.status_code == 422
        assert response.json()["field"] == field
        assert seeded.list_report_records() == []

    def test_critical_report_raises_alert_and_zone(self, client, seeded) -> None:
        report_id = client.post("/reports", json=REPORT_BODY, headers=CITIZEN).json()["report_id"]
        wait_until(lambda: len(seeded.list_active_alerts()) == 1)

        alerts = client.get("/alerts").json()
        assert len(alerts) == 1
        assert alerts[0]["type"] == "Outbreak Risk"
        assert alerts[0]["location"] == {"latitude": 12.9, "longitude": 77.6}
        assert alerts[0]["report_id"] == report_id

        view = client.get("/map", headers=CITIZEN).json()
        point = next(p for p in view["points"] if p["id"] == report_id)
        assert point["risk_level"] == "Critical"
        assert view["risk_zones"][0]["radius_meters"] == 500.0

        detail = client.get(f"/reports/{report_id}", headers=CITIZEN).json()
        assert detail["assessment"]["confidence"] == 0.9

    def test_classifier_timeout_does_not_fail_submission(self, seeded) -> None:
        release = threading.Event()
        try:
            with _client(seeded, CannedProvider(risk_json("Critical"), release=release), timeout=0.05) as client:
                started = time.monotonic()
                response = client.post("/reports", json=REPORT_BODY, headers=CITIZEN)
                assert response.status_code == 201
                assert time.monotonic() - started < 1.0

                report_id = response.json()["report_id"]
                wait_until(lambda: _classified(seeded, report_id))

                view = client.get("/map", headers=AUTHORITY).json()
                point = next(p for p in view["points"] if p["id"] == report_id)
                assert point["risk_level"] is None
                assert point["classification"] == "unclassified"
                assert view["alerts"] == []
                release.set()
        finally:
            release.set()


class TestMapRoles:
    def test_citizen_gets_no_identity(self, client, seeded) -> None:
        add_report(seeded)
        point = client.get("/map", headers=CITIZEN).json()["points"][0]
        assert point["reporter"] is None
        assert point["description"] is None

    def test_anonymous_viewer_is_citizen(self, client, seeded) -> None:
        add_report(seeded)
        assert client.get("/map").json()["points"][0]["reporter"] is None

    @pytest.mark.parametrize("headers", [WORKER, AUTHORITY])
    def test_elevated_roles_get_identity(self, client, seeded, headers) -> None:
        add_report(seeded)
        reporter = client.get("/map", headers=headers).json()["points"][0]["reporter"]
        assert reporter["full_name"] == "Asha"
        assert reporter["age"] == 34
        assert reporter["street"] == "Station Road"
        assert reporter["ward"] == "4"


class TestSolveReport:
    def test_citizen_cannot_solve(self, client, seeded) -> None:
        report = add_report(seeded)
        assert client.post(f"/reports/{report.id}/solve", headers=CITIZEN).status_code == 403

    def test_field_worker_solves_once(self, client, seeded) -> None:
        report = add_report(seeded)

        first = client.post(f"/reports/{report.id}/solve", headers=WORKER)
        second = client.post(f"/reports/{report.id}/solve", headers=AUTHORITY)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["status"] == "solved"
        assert first.json()["changed"] is True
        assert second.status_code == 200
        assert second.json()["changed"] is False

    def test_unknown_report(self, client) -> None:
        assert client.post("/reports/missing/solve", headers=WORKER).status_code == 404


class TestReporters:
    def test_register_self(self, client) -> None:
        response = client.put(
            "/reporters/new-citizen",
            json={"full_name": "New Person", "ward": "7"},
            headers={"X-Reporter-Id": "new-citizen"},
        )
        assert response.status_code == 200
        assert response.json()["role"] == "citizen"

    def test_cannot_grant_self_elevated_role(self, client) -> None:
        response = client.put("/reporters/citizen-1", json={"role": "authority"}, headers=CITIZEN)
        assert response.status_code == 403

    def test_authority_assigns_role(self, client) -> None:
        response = client.put("/reporters/citizen-2", json={"role": "fieldWorker"}, headers=AUTHORITY)
        assert response.status_code == 200
        assert response.json()["role"] == "fieldWorker"

    def test_profile_visibility(self, client) -> None:
        assert client.get("/reporters/worker-1", headers=CITIZEN).status_code == 403
        assert client.get("/reporters/citizen-1", headers=CITIZEN).json()["full_name"] == "Asha"
        assert client.get("/reporters/citizen-1", headers=WORKER).status_code == 200
        assert client.get("/reporters/nobody", headers=AUTHORITY).status_code == 404

    def test_recent_reports(self, client, seeded) -> None:
        for _ in range(3):
            add_report(seeded)

        response = client.get("/reporters/citizen-1/reports?limit=2", headers=CITIZEN)

        assert response.status_code == 200
        assert len(response.json()) == 2
        assert client.get("/reporters/citizen-1/reports", headers={"X-Reporter-Id": "citizen-9"}).status_code == 403

    @pytest.mark.parametrize("limit", ["0", "51", "abc"])
    def test_recent_reports_bad_limit(self, client, limit: str) -> None:
        response = client.get(f"/reporters/citizen-1/reports?limit={limit}", headers=CITIZEN)
        assert response.status_code == 422
        assert response.json()["field"] == "limit"


class TestInfrastructure:
    FEATURE = {"type": "drain", "name": "Station Road drain", "location": {"latitude": 12.97, "longitude": 77.59}}

    def test_only_authority_adds(self, client) -> None:
        assert client.post("/infrastructure", json=self.FEATURE, headers=WORKER).status_code == 403

        created = client.post("/infrastructure", json=self.FEATURE, headers=AUTHORITY)
        assert created.status_code == 201

        listed = client.get("/infrastructure").json()
        assert [f["id"] for f in listed] == [created.json()["id"]]
        assert client.get("/map").json()["infrastructure"][0]["name"] == "Station Road drain"
