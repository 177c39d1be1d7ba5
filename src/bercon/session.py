from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from .constants import SEQ_MODULO
from .errors import AuthenticationFailed, RconError, SequenceError, SessionError, UnexpectedMessageError
from .messages import (
    ClientMessage,
    Command,
    CommandResult,
    CommandResultPart,
    Login,
    LoginResult,
    Message,
    ServerNotice,
    ServerNoticeAck,
    decode_text,
)


class SessionState(enum.Enum):
    NEW = "new"
    AWAITING_LOGIN = "awaiting_login"
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Step:
    """What the driver has to do after one message was fed in."""

    outbound: tuple[ClientMessage, ...] = ()
    notice: str | None = None
    response: str | None = None
    complete: bool = False


@dataclass(slots=True)
class Reassembly:
    total: int
    parts: dict[int, bytes] = field(default_factory=dict)

    def add(self, part: CommandResultPart) -> None:
        if part.total != self.total:
            raise SequenceError(f"fragment declares {part.total} parts, expected {self.total}")
        if part.index >= self.total:
            raise SequenceError(f"fragment index {part.index} out of range for {self.total} parts")
        self.parts[part.index] = part.fragment

    @property
    def complete(self) -> bool:
        return len(self.parts) == self.total

    def join(self) -> str:
        return decode_text(b"".join(self.parts[i] for i in range(self.total)))


class Session:
    """Login/command/notice bookkeeping for one RCon connection.

    Owns the outgoing sequence counter and the reply reassembly buffer. It
    never touches the network: callers send what `begin_*` and `feed` hand
    back and feed in every decoded datagram.
    """

    def __init__(self, first_seq: int = 0):
        self.state = SessionState.NEW
        self.next_seq = first_seq % SEQ_MODULO
        self.pending_seq: int | None = None
        self.reassembly: Reassembly | None = None

    def _move(self, state: SessionState) -> None:
        logging.debug("session %s -> %s", self.state.value, state.value)
        self.state = state

    def _require(self, state: SessionState, action: str) -> None:
        if self.state is not state:
            raise SessionError(f"cannot {action} while {self.state.value}")

    def fail(self) -> None:
        if self.state is not SessionState.FAILED:
            self._move(SessionState.FAILED)
        self.pending_seq = None
        self.reassembly = None

    def begin_login(self, password: str) -> Login:
        self._require(SessionState.NEW, "log in")
        self._move(SessionState.AWAITING_LOGIN)
        return Login(password=password)

    def begin_command(self, command: str) -> Command:
        self._require(SessionState.IDLE, "send a command")
        seq = self.next_seq
        self.next_seq = (seq + 1) % SEQ_MODULO
        self.pending_seq = seq
        self.reassembly = None
        self._move(SessionState.AWAITING_REPLY)
        return Command(seq=seq, command=command)

    def feed(self, message: Message) -> Step:
        try:
            if self.state is SessionState.AWAITING_LOGIN:
                return self._on_login_reply(message)
            if self.state is SessionState.AWAITING_REPLY:
                return self._on_command_reply(message)
            raise UnexpectedMessageError(f"unexpected message {type(message).__name__} while {self.state.value}")
        except RconError:
            self.fail()
            raise

    def _on_login_reply(self, message: Message) -> Step:
        if not isinstance(message, LoginResult):
            raise UnexpectedMessageError(f"unexpected message {type(message).__name__} while awaiting login")
        if not message.ok:
            raise AuthenticationFailed("wrong RCon password")
        logging.info("logged in")
        self._move(SessionState.IDLE)
        return Step(complete=True)

    def _on_command_reply(self, message: Message) -> Step:
        if isinstance(message, ServerNotice):
            return Step(outbound=(ServerNoticeAck(seq=message.seq),), notice=message.text)

        if isinstance(message, CommandResult):
            if message.seq != self.pending_seq:
                raise SequenceError(f"reply for seq {message.seq}, waiting for {self.pending_seq}")
            return self._finish(message.text)

        if isinstance(message, CommandResultPart):
            if self.reassembly is None:
                self.reassembly = Reassembly(total=message.total)
            self.reassembly.add(message)
            logging.debug(
                "fragment %d/%d for seq %s", message.index + 1, message.total, self.pending_seq
            )
            if self.reassembly.complete:
                return self._finish(self.reassembly.join())
            return Step()

        raise UnexpectedMessageError(f"unexpected message {type(message).__name__} while awaiting reply")

    def _finish(self, text: str) -> Step:
        logging.info("command seq=%s answered (%d chars)", self.pending_seq, len(text))
        self.pending_seq = None
        self.reassembly = None
        self._move(SessionState.IDLE)
        return Step(response=text, complete=True)
