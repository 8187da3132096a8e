"""Keithley 2230 protocol vocabulary.

Enumerated values understood by the supply and their wire tokens. Each value
has exactly one token used when sending commands (``str(value)``); the
``parse_*`` functions decode response tokens and raise
:class:`ProtocolDecodeError` for anything they do not recognize.
"""

from __future__ import annotations

from enum import Enum

from benchpsu_core.errors import ProtocolDecodeError


class Channel(Enum):
    """Output channel of the three-channel supply.

    Members can also be looked up by channel number: ``Channel(2) is Channel.CH2``.
    """

    CH1 = "CH1"
    CH2 = "CH2"
    CH3 = "CH3"

    @classmethod
    def _missing_(cls, value: object) -> Channel | None:
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.number == value:
                    return member
        return None

    @property
    def number(self) -> int:
        """1-based channel number."""
        return int(self.value[2:])

    def __str__(self) -> str:
        return self.value


class OutputState(Enum):
    """On/off state of the global output enable or of a single channel."""

    ON = "ON"
    OFF = "OFF"

    @classmethod
    def from_bool(cls, enabled: bool) -> OutputState:
        return cls.ON if enabled else cls.OFF

    @property
    def enabled(self) -> bool:
        return self is OutputState.ON

    def __str__(self) -> str:
        return self.value


class Series(Enum):
    """Series coupling of channels 1 and 2."""

    ON = "ON"
    OFF = "OFF"

    def __str__(self) -> str:
        return self.value


class Parallel(Enum):
    """Parallel coupling of channels 1 and 2.

    On the wire ``ON`` is expressed as the channel group ``CH1CH2``.
    """

    ON = "ON"
    OFF = "OFF"

    def __str__(self) -> str:
        return self.value


_STATE_TOKENS: dict[str, OutputState] = {
    "ON": OutputState.ON,
    "1": OutputState.ON,
    "OFF": OutputState.OFF,
    "0": OutputState.OFF,
}


def parse_channel(token: str) -> Channel:
    """Decode a channel token such as ``"CH2"``.

    Args:
        token: Response text; surrounding whitespace is ignored.

    Returns:
        The matching channel.

    Raises:
        ProtocolDecodeError: If the token names no known channel.
    """
    try:
        return Channel(token.strip().upper())
    except ValueError:
        raise ProtocolDecodeError(f"Unknown channel token: {token!r}", response=token) from None


def parse_state(token: str) -> OutputState:
    """Decode an on/off token. Accepts ``ON``/``OFF`` and ``1``/``0``.

    Raises:
        ProtocolDecodeError: If the token is not a recognized state.
    """
    state = _STATE_TOKENS.get(token.strip().upper())
    if state is None:
        raise ProtocolDecodeError(f"Unknown output state token: {token!r}", response=token)
    return state
