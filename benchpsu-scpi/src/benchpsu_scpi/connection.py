"""SCPI connection over a line-based transport.

This module provides the :class:`ScpiConnection` class, which wraps a
transport to provide command/query round-trips, ``*IDN?`` parsing and
optional error queue checking.

Typical usage::

    from benchpsu_scpi import VisaResource, ScpiConnection

    transport = VisaResource("USB0::0x05E6::0x2230::9030123::INSTR")
    transport.open()
    conn = ScpiConnection(transport)

    identity = conn.get_identity()
    conn.command("SYST:REM")
    channel = conn.query("INST?")

    conn.close()
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from benchpsu_core.types import InstrumentIdentity

from benchpsu_scpi.errors import ScpiCommandError, ScpiInstrumentError

if TYPE_CHECKING:
    from benchpsu_scpi.transport import ScpiTransport


def parse_idn_response(response: str) -> InstrumentIdentity:
    """Parse a SCPI ``*IDN?`` response into an :class:`InstrumentIdentity`.

    The standard ``*IDN?`` response format is four comma-separated fields::

        manufacturer,model,serial_number,firmware_version

    If the response contains more than four comma-separated fields, the
    extra fields are joined into the firmware string.

    Args:
        response: The raw ``*IDN?`` response string.

    Returns:
        Parsed identity with manufacturer, model, serial, and firmware.

    Raises:
        ValueError: If the response has fewer than four fields.
    """
    parts = [p.strip() for p in response.split(",")]
    if len(parts) < 4:
        raise ValueError(
            f"Expected at least 4 comma-separated fields in *IDN? response, "
            f"got {len(parts)}: {response!r}"
        )
    return InstrumentIdentity(
        manufacturer=parts[0],
        model=parts[1],
        serial=parts[2],
        firmware=",".join(parts[3:]),
    )


# Matches SCPI error responses: optional +/- code, comma, optional quoted message.
_ERROR_RE = re.compile(r"^\s*([+-]?\d+)\s*,\s*\"?([^\"]*)\"?\s*$")


class ScpiConnection:
    """SCPI connection wrapping a transport.

    Every :meth:`command` is exactly one ``write`` and every :meth:`query`
    exactly one ``write`` followed by one ``read``. When ``check_errors`` is
    enabled the instrument error queue is drained with ``SYST:ERR?`` after
    each call, which adds round-trips to the command stream; it is off by
    default so the wire traffic matches the driver's command table.

    Args:
        transport: An open :class:`ScpiTransport` instance.
        check_errors: If True, every command and query is followed by
            draining the instrument error queue. Errors raise
            :class:`ScpiCommandError`.
    """

    def __init__(self, transport: ScpiTransport, *, check_errors: bool = False) -> None:
        self._transport = transport
        self._check_errors = check_errors

    @property
    def check_errors(self) -> bool:
        """Whether automatic error checking is enabled."""
        return self._check_errors

    # -- Core operations -----------------------------------------------------

    def command(self, cmd: str, *, check: bool | None = None) -> None:
        """Send a SCPI command (no response expected).

        Args:
            cmd: The SCPI command string (e.g. ``"OUTP:ENAB ON"``).
            check: Override the instance-level error check setting.

        Raises:
            TransportError: If the transport fails to write.
            ScpiCommandError: If error checking is on and the instrument
                reports errors.
        """
        self._transport.write(cmd)
        self._check(check)

    def query(self, cmd: str, *, check: bool | None = None) -> str:
        """Send a SCPI query and return the response.

        Args:
            cmd: The SCPI query string (e.g. ``"INST?"``).
            check: Override the instance-level error check setting.

        Returns:
            The instrument response with surrounding whitespace stripped.

        Raises:
            TransportError: If the transport fails to write or read.
            ScpiCommandError: If error checking is on and the instrument
                reports errors.
        """
        self._transport.write(cmd)
        response = self._transport.read().strip()
        self._check(check)
        return response

    # -- IEEE 488.2 convenience methods --------------------------------------

    def identify(self) -> str:
        """Query the instrument identification string (``*IDN?``)."""
        return self.query("*IDN?")

    def get_identity(self) -> InstrumentIdentity:
        """Query and parse the instrument identification (``*IDN?``)."""
        return parse_idn_response(self.identify())

    # -- Error queue ---------------------------------------------------------

    def get_errors(self) -> tuple[ScpiInstrumentError, ...]:
        """Drain the instrument error queue.

        Repeatedly queries ``SYST:ERR?`` until the instrument returns a
        code 0 response.

        Returns:
            A tuple of :class:`ScpiInstrumentError` for every queued error.
        """
        errors: list[ScpiInstrumentError] = []
        while True:
            self._transport.write("SYST:ERR?")
            raw = self._transport.read().strip()
            error = self._parse_error_response(raw)
            if error is None:
                break
            errors.append(error)
        return tuple(errors)

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    # -- Private helpers -----------------------------------------------------

    def _check(self, override: bool | None) -> None:
        should_check = self._check_errors if override is None else override
        if not should_check:
            return
        errors = self.get_errors()
        if errors:
            raise ScpiCommandError(errors)

    @staticmethod
    def _parse_error_response(raw: str) -> ScpiInstrumentError | None:
        """Parse a ``SYST:ERR?`` response; ``None`` means no error."""
        match = _ERROR_RE.match(raw)
        if match is None:
            return None
        code = int(match.group(1))
        if code == 0:
            return None
        return ScpiInstrumentError(code=code, message=match.group(2).strip())
