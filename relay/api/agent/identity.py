import threading
import time
from typing import Literal

from relay.settings import app_settings

ClientIdScheme = Literal["timestamp", "host"]


class ClientIdGenerator:
    """
    Assigns identifiers to accepted agent sockets.

    IDs are built from a nanosecond timestamp that is forced to be strictly
    increasing within the process, so two sockets accepted in the same
    clock tick still get distinct IDs. They are not stable across
    reconnects.

    Schemes:
        timestamp: ``"1718031234567891234"``
        host: ``"10.0.0.7-1718031234567891234"`` (peer host prefix)
    """

    def __init__(self, scheme: ClientIdScheme | None = None) -> None:
        self.scheme = scheme or app_settings.CLIENT_ID_SCHEME
        self._last_ns = 0
        self._lock = threading.Lock()

    def _next_ns(self) -> int:
        with self._lock:
            now = time.time_ns()
            self._last_ns = now if now > self._last_ns else self._last_ns + 1
            return self._last_ns

    def next_id(self, peer_host: str | None = None) -> str:
        """
        Generate the next client ID.

        Args:
            peer_host: Remote host of the socket; used by the ``host``
                scheme, ignored otherwise.
        """
        stamp = self._next_ns()
        if self.scheme == "host" and peer_host:
            return f"{peer_host}-{stamp}"
        return str(stamp)
