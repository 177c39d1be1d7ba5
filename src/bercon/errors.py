from __future__ import annotations


class RconError(Exception):
    """Base class for everything the client raises on purpose."""


class ProtocolError(RconError, ValueError):
    """A packet could not be decoded, or is not legal right now."""


class FramingError(ProtocolError):
    pass


class PacketTooLarge(FramingError):
    """An outgoing packet would not fit in the peer's receive buffer."""


class ChecksumError(ProtocolError):
    pass


class UnknownTypeError(ProtocolError):
    pass


class UnexpectedMessageError(ProtocolError):
    pass


class SequenceError(UnexpectedMessageError):
    """Right kind of message, wrong sequence number or part bookkeeping."""


class AuthenticationFailed(RconError):
    pass


class RconTimeout(RconError, TimeoutError):
    pass


class TransportError(RconError):
    pass


class SessionError(RconError):
    """An operation was requested in a state that cannot accept it."""


class ConfigError(RconError):
    pass
