"""PyVISA transport and instrument discovery.

This module provides a VISA-based transport implementation for communicating
with SCPI instruments, and :func:`find_instrument`, which locates an
instrument by the manufacturer and model reported in its ``*IDN?`` response.
PyVISA is imported lazily so the rest of benchpsu-scpi works without it.

Supported resource string formats include:
- USB: ``USB0::0x05E6::0x2230::9030123::INSTR``
- TCPIP: ``TCPIP::192.168.1.100::INSTR``
- GPIB: ``GPIB0::22::INSTR``
- Serial: ``ASRL1::INSTR``
"""

from __future__ import annotations

import logging
from typing import Any

from benchpsu_core.errors import BenchPsuError, InstrumentNotFoundError, TransportError
from benchpsu_core.types import InstrumentIdentity

from benchpsu_scpi.connection import parse_idn_response

logger = logging.getLogger(__name__)


def _import_pyvisa() -> Any:
    try:
        import pyvisa  # type: ignore[import-not-found]  # pylint: disable=import-outside-toplevel
    except ImportError as exc:
        raise BenchPsuError(
            "pyvisa library is not installed. Install with: pip install pyvisa"
        ) from exc
    return pyvisa


class VisaResource:
    """SCPI transport backed by PyVISA.

    Uses NI-style VISA resource strings to address instruments. This class
    implements the :class:`ScpiTransport` protocol. Any exception raised by
    PyVISA while opening, writing or reading is re-raised as
    :class:`TransportError` with the original exception chained.

    Args:
        resource_string: VISA resource address.
        timeout_ms: I/O timeout in milliseconds (applied on open).
        read_termination: Character(s) that terminate read operations.
        write_termination: Character(s) appended to write operations.

    Example:
        >>> resource = VisaResource("USB0::0x05E6::0x2230::9030123::INSTR")
        >>> resource.open()
        >>> resource.write("*IDN?")
        >>> print(resource.read())
        >>> resource.close()
    """

    def __init__(
        self,
        resource_string: str,
        *,
        timeout_ms: int = 5000,
        read_termination: str = "\n",
        write_termination: str = "\n",
    ) -> None:
        self._resource_string = resource_string
        self._timeout_ms = timeout_ms
        self._read_termination = read_termination
        self._write_termination = write_termination
        self._rm: Any = None
        self._resource: Any = None

    # -- Properties ----------------------------------------------------------

    @property
    def resource_string(self) -> str:
        """The VISA resource string."""
        return self._resource_string

    @property
    def is_open(self) -> bool:
        """Return True if the resource is currently open."""
        return self._resource is not None

    # -- Lifecycle -----------------------------------------------------------

    def open(self) -> None:
        """Open the VISA resource.

        Does nothing if the resource is already open.

        Raises:
            BenchPsuError: If ``pyvisa`` is not installed.
            TransportError: If the resource cannot be opened.
        """
        if self._resource is not None:
            return

        pyvisa = _import_pyvisa()
        try:
            self._rm = pyvisa.ResourceManager()
            self._resource = self._rm.open_resource(
                self._resource_string,
                read_termination=self._read_termination,
                write_termination=self._write_termination,
            )
            self._resource.timeout = self._timeout_ms
        except Exception as exc:
            self._resource = None
            if self._rm is not None:
                try:
                    self._rm.close()
                except Exception:  # pylint: disable=broad-except
                    pass
            self._rm = None
            raise TransportError(
                f"Failed to open VISA resource {self._resource_string!r}: {exc}"
            ) from exc
        logger.info("Opened VISA resource %s", self._resource_string)

    def close(self) -> None:
        """Close the VISA resource and resource manager.

        Safe to call multiple times.
        """
        if self._resource is not None:
            try:
                self._resource.close()
            except Exception:  # pylint: disable=broad-except
                pass
            self._resource = None
        if self._rm is not None:
            try:
                self._rm.close()
            except Exception:  # pylint: disable=broad-except
                pass
            self._rm = None

    # -- Transport interface -------------------------------------------------

    def write(self, message: str) -> None:
        """Send a message to the instrument.

        Args:
            message: The SCPI command or query string.

        Raises:
            TransportError: If the resource is not open or the write fails.
        """
        if self._resource is None:
            raise TransportError("VISA resource is not open")
        try:
            self._resource.write(message)
        except Exception as exc:
            raise TransportError(f"Write of {message!r} failed: {exc}") from exc

    def read(self) -> str:
        """Read a response line from the instrument.

        Raises:
            TransportError: If the resource is not open or the read fails.
        """
        if self._resource is None:
            raise TransportError("VISA resource is not open")
        try:
            result: str = self._resource.read()
        except Exception as exc:
            raise TransportError(f"Read failed: {exc}") from exc
        return result


def _probe_identity(rm: Any, resource_string: str, timeout_ms: int) -> InstrumentIdentity | None:
    """Open *resource_string*, ask ``*IDN?`` and close it again.

    Returns ``None`` for resources that cannot be opened or do not answer
    with a parsable identity.
    """
    try:
        resource = rm.open_resource(resource_string)
    except Exception as exc:  # pylint: disable=broad-except
        logger.debug("Skipping %s: open failed (%s)", resource_string, exc)
        return None
    try:
        resource.timeout = timeout_ms
        return parse_idn_response(resource.query("*IDN?"))
    except Exception as exc:  # pylint: disable=broad-except
        logger.debug("Skipping %s: no usable *IDN? response (%s)", resource_string, exc)
        return None
    finally:
        resource.close()


def find_instrument(
    manufacturer: str,
    model: str,
    *,
    query: str = "?*::INSTR",
    timeout_ms: int = 2000,
) -> str:
    """Find the VISA resource string of an instrument by its identity.

    Lists the resources visible to the default VISA resource manager, asks
    each one for ``*IDN?`` and returns the first whose identity matches
    (see :meth:`InstrumentIdentity.matches`).

    Args:
        manufacturer: Expected manufacturer prefix (e.g. ``"Keithley Instrument"``).
        model: Expected model fragment (e.g. ``"2230"``).
        query: VISA resource filter expression.
        timeout_ms: I/O timeout used while probing each resource.

    Returns:
        The matching resource string.

    Raises:
        InstrumentNotFoundError: If no visible resource matches.
    """
    pyvisa = _import_pyvisa()
    try:
        rm = pyvisa.ResourceManager()
    except Exception as exc:
        raise InstrumentNotFoundError(f"Unable to create VISA resource manager: {exc}") from exc

    try:
        try:
            resources = rm.list_resources(query)
        except Exception as exc:
            raise InstrumentNotFoundError(f"Unable to list VISA resources: {exc}") from exc

        for resource_string in resources:
            identity = _probe_identity(rm, resource_string, timeout_ms)
            if identity is not None and identity.matches(manufacturer, model):
                logger.info(
                    "Found %s %s (serial %s) at %s",
                    identity.manufacturer,
                    identity.model,
                    identity.serial,
                    resource_string,
                )
                return resource_string
    finally:
        rm.close()

    raise InstrumentNotFoundError(f"No instrument matching {manufacturer!r} {model!r} found")
