from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .constants import PKT_COMMAND, PKT_LOGIN, PKT_MULTI, PKT_SERVER, TEXT_ENCODING


class PacketKind(enum.IntEnum):
    LOGIN = PKT_LOGIN
    MULTI = PKT_MULTI  # alias of LOGIN, told apart by packet length
    COMMAND = PKT_COMMAND
    SERVER = PKT_SERVER


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte, got {value}")


def decode_text(raw: bytes) -> str:
    return raw.decode(TEXT_ENCODING, errors="replace")


@dataclass(frozen=True, slots=True)
class Login:
    password: str

    kind = PacketKind.LOGIN


@dataclass(frozen=True, slots=True)
class LoginResult:
    result: int

    kind = PacketKind.LOGIN

    def __post_init__(self) -> None:
        _check_byte("result", self.result)

    @property
    def ok(self) -> bool:
        return self.result != 0


@dataclass(frozen=True, slots=True)
class Command:
    seq: int
    command: str

    kind = PacketKind.COMMAND

    def __post_init__(self) -> None:
        _check_byte("seq", self.seq)


@dataclass(frozen=True, slots=True)
class CommandResult:
    seq: int
    text: str

    kind = PacketKind.COMMAND

    def __post_init__(self) -> None:
        _check_byte("seq", self.seq)


@dataclass(frozen=True, slots=True)
class CommandResultPart:
    """One fragment of a reply too large for a single datagram.

    The fragment stays raw bytes: a character may straddle two fragments, so
    text is only decoded once the whole reply is reassembled.
    """

    total: int
    index: int
    fragment: bytes = b""

    kind = PacketKind.MULTI

    def __post_init__(self) -> None:
        _check_byte("total", self.total)
        _check_byte("index", self.index)

    @property
    def text(self) -> str:
        return decode_text(self.fragment)


@dataclass(frozen=True, slots=True)
class ServerNotice:
    seq: int
    text: str

    kind = PacketKind.SERVER

    def __post_init__(self) -> None:
        _check_byte("seq", self.seq)


@dataclass(frozen=True, slots=True)
class ServerNoticeAck:
    seq: int

    kind = PacketKind.SERVER

    def __post_init__(self) -> None:
        _check_byte("seq", self.seq)


ClientMessage = Union[Login, Command, ServerNoticeAck]
ServerMessage = Union[LoginResult, CommandResult, CommandResultPart, ServerNotice]
Message = Union[ClientMessage, ServerMessage]
