"""
Maintenance template API tests.

The fixed clock sits at 2024-05-31 00:01.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from fastapi.testclient import TestClient

from techmaintain.app_shell.container import Services


def create_template(client: TestClient, **kwargs: object) -> dict:
    payload: dict[str, object] = {"tech_id": "press-7", "title": "Hydraulic check"}
    payload.update(kwargs)
    response = client.post("/api/maintenance", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestTemplateCrud:
    def test_create_uses_default_interval(self, client: TestClient) -> None:
        body = create_template(client)

        assert body["interval_days"] == 30
        assert body["created_at"] == "2024-05-31"
        assert body["last_generated_date"] is None
        assert body["next_run_date"] == "2024-06-30"
        assert body["request_count"] == 0

    def test_create_validation_error(self, client: TestClient) -> None:
        response = client.post(
            "/api/maintenance", json={"tech_id": "press-7", "title": "", "interval_days": 0}
        )

        assert response.status_code == 400
        codes = {err["code"] for err in response.json()["detail"]}
        assert codes == {"title_required", "interval_invalid"}

    def test_create_schema_error(self, client: TestClient) -> None:
        response = client.post("/api/maintenance", json={"title": "No tech"})
        assert response.status_code == 422

    def test_list_and_get(self, client: TestClient) -> None:
        created = create_template(client, title="Beta")
        create_template(client, title="Alpha")

        listed = client.get("/api/maintenance").json()
        assert [t["title"] for t in listed] == ["Alpha", "Beta"]

        response = client.get(f"/api/maintenance/{created['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == "Beta"

    def test_get_missing(self, client: TestClient) -> None:
        response = client.get(f"/api/maintenance/{uuid4()}")
        assert response.status_code == 404

    def test_update_partial(self, client: TestClient) -> None:
        created = create_template(client, description="keep me")

        response = client.put(
            f"/api/maintenance/{created['id']}",
            json={"interval_days": 7, "allowed_days": [5, 1]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["interval_days"] == 7
        assert body["allowed_days"] == [1, 5]
        assert body["description"] == "keep me"
        # 2024-06-07 is a Friday
        assert body["next_run_date"] == "2024-06-07"

    def test_update_invalid_and_missing(self, client: TestClient) -> None:
        created = create_template(client)

        bad = client.put(f"/api/maintenance/{created['id']}", json={"allowed_days": [7]})
        assert bad.status_code == 400
        assert bad.json()["detail"][0]["field"] == "allowed_days"

        missing = client.put(f"/api/maintenance/{uuid4()}", json={"title": "x"})
        assert missing.status_code == 404

    def test_delete(self, client: TestClient) -> None:
        created = create_template(client)

        assert client.delete(f"/api/maintenance/{created['id']}").status_code == 204
        assert client.get(f"/api/maintenance/{created['id']}").status_code == 404
        assert client.delete(f"/api/maintenance/{created['id']}").status_code == 404


class TestSchedulingEndpoints:
    def test_next_run(self, client: TestClient) -> None:
        created = create_template(client, interval_days=10)

        response = client.get(f"/api/maintenance/{created['id']}/next-run")

        assert response.status_code == 200
        assert response.json() == {"template_id": created["id"], "next_run_date": "2024-06-10"}

    def test_next_run_inactive(self, client: TestClient) -> None:
        created = create_template(client, is_active=False)
        response = client.get(f"/api/maintenance/{created['id']}/next-run")
        assert response.json()["next_run_date"] is None

    def test_run_now(self, client: TestClient, services: Services) -> None:
        created = create_template(client, responsible_person_ids=["u-tech"])

        response = client.post(f"/api/maintenance/{created['id']}/run")

        assert response.status_code == 201
        body = response.json()
        assert body["request"]["maintenance_id"] == created["id"]
        assert body["request"]["planned_resolution_date"] == "2024-05-31"
        assert body["request"]["state"] == "assigned"
        assert body["request"]["author_id"] == "system"
        assert body["template"]["last_generated_date"] == "2024-05-31"
        assert body["template"]["request_count"] == 1
        assert body["template"]["next_run_date"] == "2024-06-30"

        # Running now again the same day still creates a request
        again = client.post(f"/api/maintenance/{created['id']}/run")
        assert again.status_code == 201
        assert services.store.requests.count_by_maintenance(UUID(created["id"])) == 2

    def test_run_now_inactive(self, client: TestClient) -> None:
        created = create_template(client, is_active=False)
        response = client.post(f"/api/maintenance/{created['id']}/run")
        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "template_inactive"

    def test_run_now_missing(self, client: TestClient) -> None:
        assert client.post(f"/api/maintenance/{uuid4()}/run").status_code == 404


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok", "service": "api"}
