"""Tests for the stream control endpoints."""

import json


class TestStartStream:
    """Tests for POST /api/stream."""

    def test_start(self, client, connection, agent_writer):
        response = client.post(
            "/api/stream", params={"client_id": "client-1", "type": "screen"}
        )

        assert response.status_code == 200
        assert response.json() == {"status": "stream_started"}
        assert connection.streaming is True
        data = agent_writer.write.call_args.args[0]
        assert json.loads(data) == {
            "type": "start_stream",
            "payload": {"type": "screen"},
        }

    def test_unknown_client(self, client):
        response = client.post("/api/stream", params={"client_id": "missing"})

        assert response.status_code == 404

    def test_missing_client_id(self, client):
        response = client.post("/api/stream")

        assert response.status_code == 422

    def test_write_failure(self, client, connection, agent_writer):
        agent_writer.drain.side_effect = BrokenPipeError()

        response = client.post("/api/stream", params={"client_id": "client-1"})

        assert response.status_code == 500
        assert connection.streaming is True


class TestStopStream:
    """Tests for POST /api/stream/stop."""

    def test_stop(self, client, connection, agent_writer):
        connection.streaming = True

        response = client.post(
            "/api/stream/stop", params={"client_id": "client-1"}
        )

        assert response.status_code == 200
        assert response.json() == {"status": "stream_stopped"}
        assert connection.streaming is False
        data = agent_writer.write.call_args.args[0]
        assert json.loads(data)["type"] == "stop_stream"


class TestGetStream:
    """Tests for GET /api/stream."""

    def test_known_client_not_implemented(self, client, connection):
        response = client.get("/api/stream", params={"client_id": "client-1"})

        assert response.status_code == 501
        assert response.json() == {"detail": "not implemented"}

    def test_unknown_client(self, client):
        response = client.get("/api/stream", params={"client_id": "missing"})

        assert response.status_code == 404
