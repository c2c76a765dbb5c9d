"""Tests for the client listing endpoints."""

from datetime import datetime, timezone

from relay.schemas.response import CommandResultRecord
from tests.mocks.connection_mocks import create_registered_connection


class TestListClients:
    """Tests for GET /api/clients."""

    def test_empty(self, client):
        response = client.get("/api/clients")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_every_connection(self, client, registry):
        first = create_registered_connection(registry, "a")
        first.info.update(hostname="box-a", os="linux")
        create_registered_connection(registry, "b")

        response = client.get("/api/clients")

        assert response.status_code == 200
        entries = {entry["id"]: entry for entry in response.json()}
        assert set(entries) == {"a", "b"}
        assert entries["a"]["hostname"] == "box-a"
        assert entries["a"]["os"] == "linux"
        assert entries["b"]["streaming"] is False
        assert entries["b"]["last_active"].endswith("Z")


class TestGetClient:
    """Tests for GET /api/client/{client_id}."""

    def test_known_client(self, client, connection):
        connection.info["hostname"] = "box"

        response = client.get("/api/client/client-1")

        assert response.status_code == 200
        assert response.json()["hostname"] == "box"

    def test_unknown_client(self, client):
        response = client.get("/api/client/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Client missing not found"}


class TestClientResults:
    """Tests for GET /api/client/{client_id}/results."""

    def test_results_in_arrival_order(self, client, connection):
        for message in ("first", "second"):
            connection.results.append(
                CommandResultRecord(
                    message=message,
                    data={"exit": "0"},
                    received_at=datetime.now(timezone.utc),
                )
            )

        response = client.get("/api/client/client-1/results")

        assert response.status_code == 200
        assert [r["message"] for r in response.json()] == ["first", "second"]
        assert response.json()[0]["data"] == {"exit": "0"}

    def test_unknown_client(self, client):
        response = client.get("/api/client/missing/results")

        assert response.status_code == 404
