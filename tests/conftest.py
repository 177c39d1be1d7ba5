from __future__ import annotations

import socket
import threading
from typing import Callable

import pytest

from bercon.errors import RconTimeout
from bercon.messages import Command, CommandResult, Login, LoginResult, Message
from bercon.packet import Origin, decode, encode

Handler = Callable[[Message], list[Message]]


class ScriptedTransport:
    """Hands out canned datagrams and records what the client sends."""

    def __init__(self, *replies: Message | bytes):
        self.replies = [r if isinstance(r, bytes) else encode(r) for r in replies]
        self.sent: list[Message] = []

    def send(self, data: bytes) -> None:
        self.sent.append(decode(data, origin=Origin.CLIENT))

    def receive(self, timeout_ms: int) -> bytes:
        if not self.replies:
            raise RconTimeout(f"no packet within {timeout_ms} ms")
        return self.replies.pop(0)


class LoopbackServer:
    """Minimal RCon server on 127.0.0.1 answering from a handler callback."""

    def __init__(self, handler: Handler):
        self.handler = handler
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.1)
        self.host, self.port = self.sock.getsockname()
        self.received: list[Message] = []
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(2048)
            except TimeoutError:
                continue
            msg = decode(data, origin=Origin.CLIENT)
            self.received.append(msg)
            for reply in self.handler(msg):
                self.sock.sendto(encode(reply), addr)

    def __enter__(self) -> "LoopbackServer":
        self._thread.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self._stop.set()
        self._thread.join(timeout=2.0)
        self.sock.close()


def echo_handler(password: str = "secret") -> Handler:
    def handle(msg: Message) -> list[Message]:
        if isinstance(msg, Login):
            return [LoginResult(1 if msg.password == password else 0)]
        if isinstance(msg, Command):
            return [CommandResult(seq=msg.seq, text=f"echo: {msg.command}")]
        return []

    return handle


@pytest.fixture
def scripted():
    return ScriptedTransport


@pytest.fixture
def loopback_server():
    servers: list[LoopbackServer] = []

    def start(handler: Handler | None = None) -> LoopbackServer:
        server = LoopbackServer(handler or echo_handler())
        server.__enter__()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.__exit__(None, None, None)
