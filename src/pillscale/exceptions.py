"""Custom exception hierarchy for pillscale."""

from __future__ import annotations


class PillScaleError(Exception):
    """Base exception for all pillscale errors."""


class PillScaleConfigError(PillScaleError):
    """Invalid or missing configuration."""


class PacketDecodeError(PillScaleError):
    """A notification could not be decoded into a telemetry packet.

    The engine treats this as terminal for the single packet: it is
    dropped and no slot state changes.
    """

    def __init__(self, message: str, *, length: int = 0) -> None:
        self.length = length
        super().__init__(message)


class TooShortError(PacketDecodeError):
    """Fewer bytes than a full telemetry frame."""


class BadMagicError(PacketDecodeError):
    """The frame does not start with the ``0xCA 0xFE`` magic."""


class PersistenceError(PillScaleError):
    """A stored record could not be parsed.

    Raised while restoring slot configuration records; callers restoring a
    whole store skip the record and fall back to a fresh configuration.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)
