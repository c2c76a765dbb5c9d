"""Tests for client ID assignment."""

from concurrent.futures import ThreadPoolExecutor

from relay.api.agent.identity import ClientIdGenerator


class TestClientIdGenerator:
    """Tests for ClientIdGenerator."""

    def test_timestamp_scheme_is_numeric(self):
        generator = ClientIdGenerator("timestamp")

        client_id = generator.next_id("10.0.0.7")

        assert client_id.isdigit()

    def test_ids_strictly_increase(self):
        generator = ClientIdGenerator("timestamp")

        ids = [int(generator.next_id()) for _ in range(1000)]

        assert all(later > earlier for earlier, later in zip(ids, ids[1:]))

    def test_ids_unique_across_threads(self):
        generator = ClientIdGenerator("timestamp")

        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(lambda _: generator.next_id(), range(2000)))

        assert len(set(ids)) == 2000

    def test_host_scheme_prefixes_peer(self):
        generator = ClientIdGenerator("host")

        client_id = generator.next_id("10.0.0.7")

        host, _, stamp = client_id.rpartition("-")
        assert host == "10.0.0.7"
        assert stamp.isdigit()

    def test_host_scheme_without_peer(self):
        generator = ClientIdGenerator("host")

        assert generator.next_id(None).isdigit()
