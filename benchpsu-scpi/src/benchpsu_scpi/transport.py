"""SCPI transport protocol definition.

This module defines the :class:`ScpiTransport` protocol, which specifies the
interface that all transport implementations must provide. Transports handle
the physical layer communication with instruments.

Implementations include:
- :class:`benchpsu_scpi.VisaResource`: PyVISA-backed transport for real hardware
- :class:`benchpsu_keithley.Keithley2230Emulator`: in-process emulator
"""

from __future__ import annotations

from typing import Protocol


class ScpiTransport(Protocol):
    """Protocol for line-based SCPI message transport.

    Implementations provide the physical layer for sending commands to and
    receiving responses from instruments. Callers are responsible for opening
    the transport before passing it to :class:`ScpiConnection`.

    Both operations block until the line has been sent or received. Failures
    are reported by raising :class:`benchpsu_core.TransportError`; timeouts
    belong to the transport, not to the layers above it.
    """

    def write(self, message: str) -> None:
        """Send one command line to the instrument.

        Args:
            message: The SCPI command or query string to send.
        """
        ...

    def read(self) -> str:
        """Block for one response line from the instrument.

        Returns:
            The response string.
        """
        ...

    def close(self) -> None:
        """Close the transport and release resources."""
        ...
