from __future__ import annotations

import logging
import socket
from typing import Protocol

from .constants import BUF_SIZE, DEFAULT_TIMEOUT_MS
from .errors import RconTimeout, TransportError


class Transport(Protocol):
    def send(self, data: bytes) -> None: ...

    def receive(self, timeout_ms: int) -> bytes: ...


class UdpEndpoint:
    def __init__(self, sock: socket.socket):
        self.sock = sock

    @classmethod
    def connect(cls, host: str, port: int) -> "UdpEndpoint":
        """Connect a datagram socket to the first address `host` resolves to."""
        try:
            infos = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_DGRAM)
        except socket.gaierror as exc:
            raise TransportError(f"getaddrinfo: {exc}") from exc

        last_exc: OSError | None = None
        for family, socktype, proto, _, addr in infos:
            try:
                sock = socket.socket(family, socktype, proto)
            except OSError as exc:
                last_exc = exc
                continue
            try:
                sock.connect(addr)
            except OSError as exc:
                sock.close()
                last_exc = exc
                continue
            logging.debug("connected to %s", addr)
            return cls(sock)

        raise TransportError(f"could not connect to {host}:{port}: {last_exc}")

    def send(self, data: bytes) -> None:
        try:
            sent = self.sock.send(data)
        except OSError as exc:
            raise TransportError(f"send failed: {exc}") from exc
        if sent != len(data):
            raise TransportError(f"partial write: {sent} of {len(data)} bytes")

    def receive(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bytes:
        self.sock.settimeout(timeout_ms / 1000.0)
        try:
            return self.sock.recv(BUF_SIZE)
        except TimeoutError as exc:
            raise RconTimeout(f"no packet within {timeout_ms} ms") from exc
        except OSError as exc:
            raise TransportError(f"receive failed: {exc}") from exc

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> "UdpEndpoint":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
