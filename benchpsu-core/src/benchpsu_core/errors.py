"""Exception types for benchpsu-core.

This module defines the exception hierarchy used throughout the benchpsu
packages. All benchpsu exceptions inherit from BenchPsuError, allowing
consumers to catch every driver-specific error with a single except clause.

Exception hierarchy:
    BenchPsuError (base)
    +-- TransportError: Write/read/open failures on the instrument session
    +-- ProtocolDecodeError: Response tokens that match no known spelling
    +-- InstrumentNotFoundError: No matching instrument could be opened
    +-- ConfigError: Invalid configuration data
"""


class BenchPsuError(Exception):
    """Base exception for all benchpsu errors.

    This is the root of the benchpsu exception hierarchy. Catch this to handle
    any driver-specific error.
    """


class TransportError(BenchPsuError):
    """Raised when the instrument session fails to write or read.

    Covers bus faults, timeouts, and disconnections reported by the
    underlying transport. Drivers propagate it unchanged and never retry.
    """


class ProtocolDecodeError(BenchPsuError):
    """Raised when a device response cannot be decoded.

    Produced when a response token does not match any known wire spelling
    (e.g. a channel query returning ``"CH9"``), or when a numeric response is
    malformed and strict parsing was requested.

    Attributes:
        response: The raw response text that failed to decode.
    """

    def __init__(self, message: str, response: str = "") -> None:
        super().__init__(message)
        self.response = response


class InstrumentNotFoundError(BenchPsuError):
    """Raised when no instrument session matching the request can be opened.

    This is a construction-time error, distinct from runtime transport
    failures on an already open session.
    """


class ConfigError(BenchPsuError):
    """Raised for invalid configuration data.

    This includes configuration files that are not mappings, missing
    required fields, and values of the wrong type.
    """
