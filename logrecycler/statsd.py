"""Fire-and-forget DogStatsD client over UDP."""

import logging
import socket

logger = logging.getLogger(__name__)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (IPv6 hosts may be bracketed)."""
    host, _, port = address.rpartition(":")
    return host.strip("[]"), int(port)


class StatsdClient:
    """Sends ``metric:value|c|#tags`` datagrams without ever blocking the caller.

    A missing or slow agent only shows up in ``dropped``.
    """

    def __init__(self, address: str):
        host, port = parse_address(address)
        # resolve once so sending never waits on DNS
        family, _, _, _, self._addr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        self._sock = socket.socket(family, socket.SOCK_DGRAM)
        self._sock.setblocking(False)
        self.sent = 0
        self.dropped = 0
        logger.info("Sending statsd metrics to %s", address)

    def incr(self, metric: str, tags: list[str], value: int = 1) -> None:
        payload = f"{metric}:{value}|c"
        if tags:
            payload += "|#" + ",".join(tags)
        try:
            self._sock.sendto(payload.encode("utf-8"), self._addr)
        except OSError as e:
            # BlockingIOError, or ECONNREFUSED reported for an earlier datagram
            self.dropped += 1
            logger.debug("Dropped statsd datagram: %s", e)
            return
        self.sent += 1

    def close(self):
        self._sock.close()
        logger.info("Statsd client closed (sent=%d, dropped=%d)", self.sent, self.dropped)
