"""BattlEye-style remote console (RCon) client over UDP.

The package is split the same way the protocol is:
- packet framing and checksums (`bercon.packet`) over a closed message set (`bercon.messages`)
- a pure session state machine (`bercon.session`) with no I/O of its own
- a thin driver (`bercon.client`) that pumps datagrams between the two
"""

from .client import RconClient
from .errors import (
    AuthenticationFailed,
    ChecksumError,
    ConfigError,
    FramingError,
    PacketTooLarge,
    ProtocolError,
    RconError,
    RconTimeout,
    SequenceError,
    SessionError,
    TransportError,
    UnexpectedMessageError,
    UnknownTypeError,
)
from .session import Session, SessionState

__all__ = [
    "AuthenticationFailed",
    "ChecksumError",
    "ConfigError",
    "FramingError",
    "PacketTooLarge",
    "ProtocolError",
    "RconClient",
    "RconError",
    "RconTimeout",
    "SequenceError",
    "Session",
    "SessionError",
    "SessionState",
    "TransportError",
    "UnexpectedMessageError",
    "UnknownTypeError",
]
