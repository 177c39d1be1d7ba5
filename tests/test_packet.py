from __future__ import annotations

import logging
import struct
import zlib

import pytest

import bercon.packet
from bercon.errors import ChecksumError, FramingError, PacketTooLarge, RconError, UnknownTypeError
from bercon.messages import (
    Command,
    CommandResult,
    CommandResultPart,
    Login,
    LoginResult,
    ServerNotice,
    ServerNoticeAck,
)
from bercon.packet import Origin, compute_checksum, decode, encode


def reseal(raw: bytearray) -> bytes:
    struct.pack_into("<I", raw, 2, zlib.crc32(bytes(raw[6:])))
    return bytes(raw)


def test_layout_login():
    raw = encode(Login("secret"))
    assert raw[:2] == b"BE"
    assert raw[6] == 0xFF
    assert raw[7] == 0
    assert raw[8:] == b"secret"
    assert struct.unpack_from("<I", raw, 2)[0] == zlib.crc32(raw[6:])


def test_layout_command_and_ack():
    raw = encode(Command(seq=5, command="players"))
    assert raw[7] == 1
    assert raw[8] == 5
    assert raw[9:] == b"players"

    ack = encode(ServerNoticeAck(seq=200))
    assert len(ack) == 9
    assert ack[7:] == b"\x02\xc8"


def test_checksum_matches_zlib():
    assert compute_checksum(b"\xff\x00abc") == zlib.crc32(b"\xff\x00abc")


def test_encode_is_deterministic():
    m = CommandResult(seq=3, text="ok")
    assert encode(m) == encode(m)


@pytest.mark.parametrize(
    "message",
    [
        LoginResult(result=1),
        LoginResult(result=0),
        CommandResult(seq=0, text="No players"),
        CommandResultPart(total=2, index=1, fragment=b"world"),
        CommandResultPart(total=1, index=0, fragment=b""),
        ServerNotice(seq=255, text="Player #1 connected"),
    ],
)
def test_roundtrip_server_messages(message):
    assert decode(encode(message)) == message


@pytest.mark.parametrize(
    "message",
    [
        Login("hunter2"),
        Login(""),
        Command(seq=17, command="say -1 hi"),
        ServerNoticeAck(seq=9),
    ],
)
def test_roundtrip_client_messages(message):
    assert decode(encode(message), origin=Origin.CLIENT) == message


def test_tag_zero_is_split_by_length():
    assert isinstance(decode(encode(LoginResult(1))), LoginResult)
    part = decode(encode(CommandResultPart(total=3, index=2, fragment=b"x")))
    assert isinstance(part, CommandResultPart)
    assert (part.total, part.index, part.fragment) == (3, 2, b"x")


def test_text_needs_no_terminator():
    msg = decode(encode(CommandResult(seq=1, text="a\x00b")))
    assert msg.text == "a\x00b"


def test_bad_checksum():
    raw = bytearray(encode(CommandResult(seq=2, text="x")))
    raw[-1] ^= 0xFF
    with pytest.raises(ChecksumError):
        decode(bytes(raw))


def test_any_payload_bit_flip_fails_checksum():
    raw = encode(ServerNotice(seq=4, text="hello"))
    for offset in range(6, len(raw)):
        for bit in range(8):
            corrupted = bytearray(raw)
            corrupted[offset] ^= 1 << bit
            with pytest.raises(ChecksumError):
                decode(bytes(corrupted))


def test_too_short():
    with pytest.raises(FramingError):
        decode(b"BE\x00\x00\x00\x00\xff")


def test_bad_signature():
    raw = bytearray(encode(LoginResult(1)))
    raw[0] = ord("X")
    with pytest.raises(FramingError):
        decode(bytes(raw))


def test_bad_sentinel():
    raw = bytearray(encode(LoginResult(1)))
    raw[6] = 0x00
    with pytest.raises(FramingError):
        decode(reseal(raw))


def test_unknown_type():
    raw = bytearray(encode(CommandResult(seq=0, text="x")))
    raw[7] = 7
    with pytest.raises(UnknownTypeError):
        decode(reseal(raw))


def test_truncated_sequenced_packet():
    raw = bytearray(encode(Login("")))
    raw[7] = 1
    with pytest.raises(FramingError):
        decode(reseal(raw))


def test_packet_too_large():
    with pytest.raises(PacketTooLarge) as exc:
        encode(Command(seq=0, command="x" * 4096))
    assert isinstance(exc.value, RconError)
    assert isinstance(exc.value, ValueError)


def test_field_out_of_range():
    with pytest.raises(ValueError):
        Command(seq=256, command="x")


def test_hexdump_skipped_unless_debug(monkeypatch, caplog):
    def boom(raw):
        raise AssertionError("hexdump called with DEBUG off")

    monkeypatch.setattr(bercon.packet, "hexdump", boom)
    with caplog.at_level(logging.WARNING):
        assert decode(encode(LoginResult(1))) == LoginResult(1)


def test_hexdump_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG):
        encode(ServerNoticeAck(seq=1))
    assert any("42 45" in r.getMessage() for r in caplog.records)
