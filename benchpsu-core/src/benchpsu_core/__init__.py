"""Core library for benchpsu instrument drivers.

This package provides the exception hierarchy and shared value types used by
the benchpsu transport and driver packages. It has no external dependencies
so it can serve as the base layer for all other benchpsu packages.

Key components:
    - Errors: BenchPsuError and its subclasses for transport, decoding,
      discovery, and configuration failures.
    - Types: InstrumentIdentity parsed from ``*IDN?`` responses.

Example:
    >>> from benchpsu_core import InstrumentIdentity
    >>> identity = InstrumentIdentity("Keithley instruments", "2230-30-1", "1", "1.0")
    >>> identity.matches("Keithley Instrument", "2230")
    True
"""

from benchpsu_core.errors import (
    BenchPsuError,
    ConfigError,
    InstrumentNotFoundError,
    ProtocolDecodeError,
    TransportError,
)
from benchpsu_core.types import InstrumentIdentity

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Errors
    "BenchPsuError",
    "ConfigError",
    "InstrumentNotFoundError",
    "ProtocolDecodeError",
    "TransportError",
    # Types
    "InstrumentIdentity",
]
