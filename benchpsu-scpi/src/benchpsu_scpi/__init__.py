"""SCPI transport library for benchpsu instrument drivers.

This package provides the communication layer the instrument drivers are
built on. It includes:

- Transport abstraction for line-based SCPI message passing
- PyVISA-backed transport for real instruments
- Instrument discovery by ``*IDN?`` manufacturer and model
- A connection wrapper with command/query round-trips
- Number parsing and formatting helpers

Typical usage::

    from benchpsu_scpi import ScpiConnection, VisaResource, find_instrument

    address = find_instrument("Keithley Instrument", "2230")
    transport = VisaResource(address)
    transport.open()
    conn = ScpiConnection(transport)
    print(conn.get_identity())
    conn.close()
"""

from benchpsu_scpi.connection import ScpiConnection, parse_idn_response
from benchpsu_scpi.errors import ScpiCommandError, ScpiError, ScpiInstrumentError
from benchpsu_scpi.number import format_number, parse_number
from benchpsu_scpi.transport import ScpiTransport
from benchpsu_scpi.visa import VisaResource, find_instrument

__all__ = [
    # Connection
    "ScpiConnection",
    "parse_idn_response",
    # Errors
    "ScpiCommandError",
    "ScpiError",
    "ScpiInstrumentError",
    # Numbers
    "format_number",
    "parse_number",
    # Transport
    "ScpiTransport",
    # VISA
    "VisaResource",
    "find_instrument",
]
