from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from . import packet
from .constants import DEFAULT_TIMEOUT_MS
from .messages import ClientMessage
from .net import Transport
from .session import Session

NoticeHandler = Callable[[str], None]


@dataclass(slots=True)
class RconClient:
    """Drives a Session over a Transport, one request at a time.

    Every failure is terminal: the session is marked failed and the error
    propagates. Reconnecting is up to the caller.
    """

    transport: Transport
    session: Session = field(default_factory=Session)
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def login(self, password: str) -> None:
        self._send(self.session.begin_login(password))
        self._drive(None)

    def execute(self, command: str, on_notice: Optional[NoticeHandler] = None) -> str:
        self._send(self.session.begin_command(command))
        response = self._drive(on_notice)
        return response or ""

    def _send(self, message: ClientMessage) -> None:
        try:
            self.transport.send(packet.encode(message))
        except Exception:
            self.session.fail()
            raise

    def _drive(self, on_notice: Optional[NoticeHandler]) -> str | None:
        while True:
            try:
                raw = self.transport.receive(self.timeout_ms)
                step = self.session.feed(packet.decode(raw))
                for message in step.outbound:
                    self._send(message)
                if step.notice is not None:
                    logging.debug("server notice: %s", step.notice)
                    if on_notice is not None:
                        on_notice(step.notice)
            except Exception:
                self.session.fail()
                raise

            if step.complete:
                return step.response
