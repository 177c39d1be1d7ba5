from __future__ import annotations

SIGNATURE = b"BE"
SENTINEL = 0xFF
HEADER_FORMAT = "<2sIBB"  # signature, crc32, sentinel, tag
HEADER_SIZE = 8
CHECKSUM_OFFSET = 2
SENTINEL_OFFSET = 6

PKT_LOGIN = 0
PKT_MULTI = 0
PKT_COMMAND = 1
PKT_SERVER = 2

SEQ_MODULO = 256
TEXT_ENCODING = "utf-8"

BUF_SIZE = 2048
DEFAULT_TIMEOUT_MS = 500
CONFIG_FILE_NAME = "./rcon.cfg"
