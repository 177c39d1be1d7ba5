from __future__ import annotations

import enum
import logging
import struct
import zlib

from .constants import (
    BUF_SIZE,
    CHECKSUM_OFFSET,
    HEADER_FORMAT,
    HEADER_SIZE,
    SENTINEL,
    SENTINEL_OFFSET,
    SIGNATURE,
    TEXT_ENCODING,
)
from .errors import ChecksumError, FramingError, PacketTooLarge, UnknownTypeError
from .messages import (
    Command,
    CommandResult,
    CommandResultPart,
    Login,
    LoginResult,
    Message,
    PacketKind,
    ServerNotice,
    ServerNoticeAck,
    decode_text,
)

CHECKSUM_STRUCT = struct.Struct("<I")


class Origin(enum.Enum):
    """Which side sent a datagram. Tags mean different things each way."""

    SERVER = "server"
    CLIENT = "client"


def compute_checksum(body: bytes) -> int:
    """CRC-32 of everything from the sentinel byte onward."""
    return zlib.crc32(body) & 0xFFFFFFFF


def hexdump(raw: bytes) -> str:
    return raw.hex(" ")


def _payload(message: Message) -> bytes:
    if isinstance(message, Login):
        return message.password.encode(TEXT_ENCODING)
    if isinstance(message, LoginResult):
        return bytes([message.result])
    if isinstance(message, Command):
        return bytes([message.seq]) + message.command.encode(TEXT_ENCODING)
    if isinstance(message, CommandResult):
        return bytes([message.seq]) + message.text.encode(TEXT_ENCODING)
    if isinstance(message, CommandResultPart):
        return bytes([message.total, message.index]) + message.fragment
    if isinstance(message, ServerNotice):
        return bytes([message.seq]) + message.text.encode(TEXT_ENCODING)
    if isinstance(message, ServerNoticeAck):
        return bytes([message.seq])
    raise TypeError(f"not a protocol message: {message!r}")


def encode(message: Message) -> bytes:
    buf = bytearray(struct.pack(HEADER_FORMAT, SIGNATURE, 0, SENTINEL, int(message.kind)))
    buf += _payload(message)
    if len(buf) > BUF_SIZE:
        raise PacketTooLarge(f"packet too large: {len(buf)} > {BUF_SIZE}")

    crc = compute_checksum(bytes(buf[SENTINEL_OFFSET:]))
    CHECKSUM_STRUCT.pack_into(buf, CHECKSUM_OFFSET, crc)
    raw = bytes(buf)
    if logging.getLogger().isEnabledFor(logging.DEBUG):
        logging.debug("encode %s: %s", type(message).__name__, hexdump(raw))
    return raw


def _check_frame(raw: bytes) -> int:
    if len(raw) < HEADER_SIZE:
        raise FramingError(f"packet too short: {len(raw)} bytes")

    signature, stored_crc, sentinel, tag = struct.unpack_from(HEADER_FORMAT, raw)
    if signature != SIGNATURE:
        raise FramingError(f"bad signature {signature!r}, expected {SIGNATURE!r}")

    actual_crc = compute_checksum(raw[SENTINEL_OFFSET:])
    if actual_crc != stored_crc:
        raise ChecksumError(f"checksum mismatch: stored {stored_crc:08x}, computed {actual_crc:08x}")

    if sentinel != SENTINEL:
        raise FramingError(f"unexpected byte {sentinel:#04x} at offset {SENTINEL_OFFSET}")
    return tag


def _require_seq(raw: bytes) -> int:
    if len(raw) < HEADER_SIZE + 1:
        raise FramingError("packet truncated before sequence number")
    return raw[HEADER_SIZE]


def _decode_from_server(tag: int, raw: bytes) -> Message:
    if tag == PacketKind.LOGIN:
        # Same tag for login results and reply fragments; only the length tells them apart.
        if len(raw) == HEADER_SIZE + 1:
            return LoginResult(result=raw[HEADER_SIZE])
        if len(raw) > HEADER_SIZE + 1:
            return CommandResultPart(
                total=raw[HEADER_SIZE],
                index=raw[HEADER_SIZE + 1],
                fragment=raw[HEADER_SIZE + 2 :],
            )
        raise FramingError("login/multi-part packet without payload")

    if tag == PacketKind.COMMAND:
        seq = _require_seq(raw)
        return CommandResult(seq=seq, text=decode_text(raw[HEADER_SIZE + 1 :]))

    if tag == PacketKind.SERVER:
        seq = _require_seq(raw)
        return ServerNotice(seq=seq, text=decode_text(raw[HEADER_SIZE + 1 :]))

    raise UnknownTypeError(f"unknown message type {tag:#04x}")


def _decode_from_client(tag: int, raw: bytes) -> Message:
    if tag == PacketKind.LOGIN:
        return Login(password=decode_text(raw[HEADER_SIZE:]))

    if tag == PacketKind.COMMAND:
        seq = _require_seq(raw)
        return Command(seq=seq, command=decode_text(raw[HEADER_SIZE + 1 :]))

    if tag == PacketKind.SERVER:
        seq = _require_seq(raw)
        if len(raw) != HEADER_SIZE + 1:
            raise FramingError(f"acknowledgement must be {HEADER_SIZE + 1} bytes, got {len(raw)}")
        return ServerNoticeAck(seq=seq)

    raise UnknownTypeError(f"unknown message type {tag:#04x}")


def decode(raw: bytes, origin: Origin = Origin.SERVER) -> Message:
    """Validate one datagram and turn it into a message.

    Checks run in a fixed order (length, signature, checksum, sentinel) and
    each failure raises its own ProtocolError subclass. `origin` selects the
    server->client reading (the default, what a client receives) or the
    client->server reading of the type tag.
    """
    if logging.getLogger().isEnabledFor(logging.DEBUG):
        logging.debug("decode (%s): %s", origin.value, hexdump(raw))
    tag = _check_frame(raw)
    if origin is Origin.CLIENT:
        return _decode_from_client(tag, raw)
    return _decode_from_server(tag, raw)
