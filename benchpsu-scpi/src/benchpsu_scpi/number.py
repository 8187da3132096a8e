"""SCPI number parsing and formatting utilities.

Handles NR1 (integer), NR2 (fixed-point), and NR3 (scientific notation)
numeric formats plus the special float tokens NAN, INF and NINF.
"""

from __future__ import annotations

import math

_SPECIAL_FLOAT_MAP: dict[str, float] = {
    "NAN": float("nan"),
    "INF": float("inf"),
    "NINF": float("-inf"),
    "-INF": float("-inf"),
}


def parse_number(text: str) -> float:
    """Parse a SCPI numeric field into a float.

    Accepts NR1 (``"42"``), NR2 (``"1.23"``), NR3 (``"1.23E+4"``),
    and the special tokens ``NAN``, ``INF``, ``NINF``, and ``-INF``.

    Args:
        text: The raw field (leading/trailing whitespace is stripped).

    Returns:
        The parsed float value.

    Raises:
        ValueError: If *text* cannot be parsed as a SCPI number.
    """
    token = text.strip().upper()
    special = _SPECIAL_FLOAT_MAP.get(token)
    if special is not None:
        return special
    # float() also takes Python digit separators such as "1_0"
    if "_" in token:
        raise ValueError(f"Invalid SCPI number: {text!r}")
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"Invalid SCPI number: {text!r}") from None


def format_number(value: float) -> str:
    """Format a number for use in a SCPI command.

    ``nan``, ``inf``, and ``-inf`` are rendered as ``NAN``, ``INF``, and
    ``NINF``. Finite values use Python's default ``str()`` representation,
    which is the shortest string that round-trips to the same float.

    Args:
        value: The numeric value to format.

    Returns:
        A SCPI-compatible string representation.
    """
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "NINF" if value < 0 else "INF"
    return str(value)
