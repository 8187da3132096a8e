"""Measurement response parsing for the Keithley 2230.

The ``FETC:<quantity>? ALL`` queries answer with one line of three
comma-separated numbers, one per channel in channel order. The supply is
read leniently by default:

- a field that is not a number reads as ``0.0`` and the other fields are kept;
- a line without exactly three fields reads as ``(0.0, 0.0, 0.0)``.

Lenient parsing never raises, which also hides garbled transport data, so
``strict=True`` turns both cases into :class:`ProtocolDecodeError`.
"""

from __future__ import annotations

import logging

from benchpsu_core.errors import ProtocolDecodeError
from benchpsu_scpi.number import parse_number

logger = logging.getLogger(__name__)

FIELD_COUNT = 3

_ZERO_TRIPLE: tuple[float, float, float] = (0.0, 0.0, 0.0)


def _parse_field(field: str, response: str, strict: bool) -> float:
    try:
        return parse_number(field)
    except ValueError:
        if strict:
            raise ProtocolDecodeError(
                f"Invalid numeric field {field.strip()!r} in response {response!r}",
                response=response,
            ) from None
        logger.warning("Invalid numeric field %r in response %r, reading 0.0", field, response)
        return 0.0


def parse_triple(text: str, *, strict: bool = False) -> tuple[float, float, float]:
    """Parse a three-channel measurement response.

    Args:
        text: Response line, e.g. ``"1.0000,2.0000,3.0000"``.
        strict: Raise instead of defaulting malformed input to ``0.0``.

    Returns:
        Values for channels 1, 2 and 3.

    Raises:
        ProtocolDecodeError: Only in strict mode, for a wrong field count or
            a non-numeric field.
    """
    fields = text.split(",")
    if len(fields) != FIELD_COUNT:
        if strict:
            raise ProtocolDecodeError(
                f"Expected {FIELD_COUNT} comma-separated fields, got {len(fields)}: {text!r}",
                response=text,
            )
        logger.warning("Expected %d fields in response %r, reading zeros", FIELD_COUNT, text)
        return _ZERO_TRIPLE
    first, second, third = (_parse_field(field, text, strict) for field in fields)
    return (first, second, third)
