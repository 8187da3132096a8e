"""Keithley 2230 triple-channel DC power supply driver.

Wraps a ``ScpiConnection`` with typed methods for the Keithley 2230 series.
All operations are blocking round-trips on the one connection the driver
owns; the driver keeps no copy of instrument state.
"""

from __future__ import annotations

import logging
from types import TracebackType

from benchpsu_core import InstrumentIdentity
from benchpsu_scpi import ScpiConnection, VisaResource, find_instrument

from benchpsu_keithley import commands
from benchpsu_keithley.channel_state import ChannelSelector
from benchpsu_keithley.models import ChannelSetting, Measurement
from benchpsu_keithley.parser import parse_triple
from benchpsu_keithley.vocabulary import Channel, OutputState, Parallel, Series

logger = logging.getLogger(__name__)

MANUFACTURER = "Keithley Instrument"
MODEL = "2230"


class Keithley2230:
    """High-level driver for Keithley 2230 series power supplies.

    Not thread-safe. :meth:`enable_channel` is a four-step sequence on the
    shared connection; callers sharing one driver must serialize access (see
    :class:`benchpsu_keithley.psu_channel.Keithley2230MultiChannel`).

    Args:
        connection: An open ``ScpiConnection`` to the instrument. The driver
            takes ownership and closes it in :meth:`close`.
        strict: Raise :class:`ProtocolDecodeError` for malformed measurement
            responses instead of reading them as zeros.
    """

    def __init__(self, connection: ScpiConnection, *, strict: bool = False) -> None:
        self._conn = connection
        self._selector = ChannelSelector(connection)
        self._strict = strict

    def __enter__(self) -> Keithley2230:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def strict(self) -> bool:
        """Whether measurement responses are parsed strictly."""
        return self._strict

    # -- Identity / lifecycle -----------------------------------------------

    def identify(self) -> str:
        """Query instrument identification string (``*IDN?``)."""
        return self._conn.identify()

    def get_identity(self) -> InstrumentIdentity:
        """Query and parse instrument identification (``*IDN?``)."""
        return self._conn.get_identity()

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    # -- Setpoints ------------------------------------------------------------

    def set_channel(self, channel: Channel, voltage: float, current: float) -> None:
        """Set voltage and current of *channel* with one ``APPL`` command.

        Args:
            channel: Target channel; the selection is not changed.
            voltage: Voltage in volts.
            current: Current limit in amps.
        """
        self._send(commands.apply(channel, voltage, current))

    def apply(self, setting: ChannelSetting) -> None:
        """Send a :class:`ChannelSetting`."""
        self._send(commands.apply_setting(setting))

    # -- Output -------------------------------------------------------------

    def enable_output(self, state: OutputState) -> None:
        """Switch the global output enable (``OUTP:ENAB``)."""
        self._send(commands.output_enable(state))

    def enable_channel(self, channel: Channel, state: OutputState) -> None:
        """Switch the output of a single channel.

        The instrument only switches the selected channel, so this selects
        *channel*, sends ``CHAN:OUTP`` and re-selects whatever was selected
        before. On error the remaining steps are skipped and the instrument
        may be left with *channel* selected.
        """
        with self._selector.selected(channel):
            self._send(commands.channel_output(state))

    # -- Channel selection ----------------------------------------------------

    def select_channel(self, channel: Channel) -> None:
        """Select *channel* (``INST <CH>``)."""
        self._selector.select(channel)

    def get_channel(self) -> Channel:
        """Query the selected channel (``INST?``).

        Raises:
            ProtocolDecodeError: If the response is not a known channel.
        """
        return self._selector.current()

    # -- Control mode -------------------------------------------------------

    def switch_to_front_panel_control(self) -> None:
        """Return control to the front panel (``SYST:LOC``)."""
        self._send(commands.LOCAL)

    def switch_to_remote_control(self) -> None:
        """Lock the front panel for remote control (``SYST:REM``)."""
        self._send(commands.REMOTE)

    # -- Measurements -------------------------------------------------------

    def read_current(self) -> tuple[float, float, float]:
        """Fetch the output current of channels 1, 2 and 3 in amps."""
        return self._fetch(commands.FETCH_CURRENT)

    def read_voltage(self) -> tuple[float, float, float]:
        """Fetch the output voltage of channels 1, 2 and 3 in volts."""
        return self._fetch(commands.FETCH_VOLTAGE)

    def read_power(self) -> tuple[float, float, float]:
        """Fetch the output power of channels 1, 2 and 3 in watts."""
        return self._fetch(commands.FETCH_POWER)

    def read_all(self) -> Measurement:
        """Fetch voltage, current and power of every channel.

        Three independent round-trips (current, voltage, power), so the
        values may come from different instants.
        """
        currents = self.read_current()
        voltages = self.read_voltage()
        powers = self.read_power()
        return Measurement.from_triples(voltages, currents, powers)

    # -- Coupling -------------------------------------------------------------

    def set_parallel(self, mode: Parallel) -> None:
        """Couple channels 1 and 2 in parallel, or undo it."""
        self._send(commands.parallel(mode))

    def set_series(self, mode: Series) -> None:
        """Couple channels 1 and 2 in series, or undo it."""
        self._send(commands.series(mode))

    # -- Private helpers ------------------------------------------------------

    def _send(self, command: str) -> None:
        logger.debug("-> %s", command)
        self._conn.command(command)

    def _fetch(self, query: str) -> tuple[float, float, float]:
        response = self._conn.query(query)
        logger.debug("%s <- %s", query, response)
        return parse_triple(response, strict=self._strict)


def create_instrument(
    visa_address: str | None = None,
    *,
    manufacturer: str = MANUFACTURER,
    model: str = MODEL,
    timeout_ms: int = 5000,
    strict: bool = False,
) -> Keithley2230:
    """Create a Keithley 2230 driver from a VISA address.

    Standard factory entry point. When *visa_address* is omitted the
    instrument is located by its ``*IDN?`` manufacturer and model.

    Args:
        visa_address: VISA resource string
            (e.g. ``"USB0::0x05E6::0x2230::9030123::INSTR"``).
        manufacturer: Manufacturer prefix used for discovery.
        model: Model fragment used for discovery.
        timeout_ms: VISA I/O timeout.
        strict: Parse measurement responses strictly.

    Returns:
        Connected driver instance.

    Raises:
        InstrumentNotFoundError: If discovery finds no matching instrument.
        TransportError: If the resource cannot be opened.
    """
    if visa_address is None:
        visa_address = find_instrument(manufacturer, model)
    resource = VisaResource(visa_address, timeout_ms=timeout_ms)
    resource.open()
    return Keithley2230(ScpiConnection(resource), strict=strict)
