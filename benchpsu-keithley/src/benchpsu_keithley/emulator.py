"""Keithley 2230 power supply emulator.

Provides an in-process SCPI emulator implementing the ``ScpiTransport``
protocol, with the hidden selected-channel register, per-channel setpoints
and outputs, the global output enable and the coupling modes of a
three-channel Keithley 2230.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from benchpsu_keithley.vocabulary import Channel

# ---------------------------------------------------------------------------
# Long-form -> short-form SCPI keyword map
# ---------------------------------------------------------------------------

_LONG_TO_SHORT: dict[str, str] = {
    "APPLY": "APPL",
    "CHANNEL": "CHAN",
    "CURRENT": "CURR",
    "ENABLE": "ENAB",
    "ERROR": "ERR",
    "FETCH": "FETC",
    "INSTRUMENT": "INST",
    "LOCAL": "LOC",
    "OUTPUT": "OUTP",
    "PARALLEL": "PAR",
    "POWER": "POW",
    "REMOTE": "REM",
    "SELECT": "SEL",
    "SERIES": "SER",
    "STATE": "STAT",
    "SYSTEM": "SYST",
    "VOLTAGE": "VOLT",
}

# Optional segments dropped during normalization
_OPTIONAL_SEGMENTS: set[str] = {"SEL", "STAT", "SCAL", "DC"}


def _normalize_header(header: str) -> str:
    """Normalize a SCPI header to canonical short form.

    Uppercases, strips a leading colon, maps long keywords to their short
    forms and drops optional segments, so ``:INSTrument:SELect`` and
    ``INST`` normalize to the same key.
    """
    upper = header.upper()
    if upper.startswith(":"):
        upper = upper[1:]
    segments = [_LONG_TO_SHORT.get(seg, seg) for seg in upper.split(":")]
    return ":".join(seg for seg in segments if seg not in _OPTIONAL_SEGMENTS)


_ON_TOKENS = ("ON", "1")
_OFF_TOKENS = ("OFF", "0")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Keithley2230EmulatorConfig:
    """Configuration for a Keithley 2230 emulator instance.

    Args:
        identity: ``*IDN?`` response string.
        max_voltage: Per-channel voltage limits in volts, channel order.
        max_current: Per-channel current limits in amps, channel order.
    """

    identity: str
    max_voltage: tuple[float, float, float]
    max_current: tuple[float, float, float]

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("identity must be non-empty")
        if any(v <= 0 for v in self.max_voltage):
            raise ValueError("max_voltage must be > 0")
        if any(i <= 0 for i in self.max_current):
            raise ValueError("max_current must be > 0")


@dataclass
class _ChannelState:
    voltage_setpoint: float = 0.0
    current_limit: float = 0.0
    output_enabled: bool = False
    measured_current: float | None = None


# ---------------------------------------------------------------------------
# Emulator
# ---------------------------------------------------------------------------


class Keithley2230Emulator:
    """In-process Keithley 2230 emulator implementing ``ScpiTransport``.

    Voltage readings follow the setpoint while both the global output enable
    and the channel output are on. Current readings are 0 unless overridden
    with :meth:`set_measured_current`; power is voltage times current.

    Args:
        config: Emulator configuration specifying model characteristics.
    """

    def __init__(self, config: Keithley2230EmulatorConfig) -> None:
        self._config = config
        self._channels: dict[Channel, _ChannelState] = {ch: _ChannelState() for ch in Channel}
        self._selected: Channel = Channel.CH1
        self._output_enabled = False
        self._series = False
        self._parallel = False
        self._remote = False
        self._response_buffer = ""
        self._error_queue: list[tuple[int, str]] = []
        self.closed = False

        self._set_handlers: dict[str, Callable[[str], None]] = {
            "APPL": self._set_apply,
            "OUTP:ENAB": self._set_output_enable,
            "CHAN:OUTP": self._set_channel_output,
            "INST": self._set_selected,
            "SYST:LOC": self._set_local,
            "SYST:REM": self._set_remote,
            "OUTP:PAR": self._set_parallel,
            "OUTP:SER": self._set_series,
        }

        self._query_handlers: dict[str, Callable[[str], str]] = {
            "INST?": self._get_selected,
            "OUTP:ENAB?": self._get_output_enable,
            "CHAN:OUTP?": self._get_channel_output,
            "OUTP:SER?": self._get_series,
            "FETC:VOLT?": self._fetch_voltage,
            "FETC:CURR?": self._fetch_current,
            "FETC:POW?": self._fetch_power,
        }

    # -- Transport interface ------------------------------------------------

    def write(self, message: str) -> None:
        """Process a SCPI command or query string."""
        line = message.strip()
        if not line:
            return

        is_query = "?" in line
        if is_query:
            qmark_idx = line.index("?")
            header = line[: qmark_idx + 1]
            args = line[qmark_idx + 1 :].strip()
        else:
            parts = line.split(None, 1)
            header = parts[0]
            args = parts[1] if len(parts) > 1 else ""

        if self._handle_common_command(header):
            return

        if is_query:
            query = self._query_handlers.get(_normalize_header(header.rstrip("?")) + "?")
            if query is None:
                self._error_queue.append((-113, "Undefined header"))
                return
            self._response_buffer = query(args)
        else:
            command = self._set_handlers.get(_normalize_header(header))
            if command is None:
                self._error_queue.append((-113, "Undefined header"))
                return
            command(args)

    def read(self) -> str:
        """Return and clear the buffered response."""
        resp = self._response_buffer
        self._response_buffer = ""
        return resp

    def close(self) -> None:
        self.closed = True

    # -- Inspection / test helpers -----------------------------------------

    @property
    def selected_channel(self) -> Channel:
        return self._selected

    @property
    def output_enabled(self) -> bool:
        return self._output_enabled

    @property
    def series(self) -> bool:
        return self._series

    @property
    def parallel(self) -> bool:
        return self._parallel

    @property
    def remote(self) -> bool:
        return self._remote

    def channel_output(self, channel: Channel) -> bool:
        """Return whether *channel*'s own output switch is on."""
        return self._channels[channel].output_enabled

    def setpoint(self, channel: Channel) -> tuple[float, float]:
        """Return ``(voltage, current)`` setpoints of *channel*."""
        state = self._channels[channel]
        return (state.voltage_setpoint, state.current_limit)

    def set_measured_current(self, value: float, channel: Channel = Channel.CH1) -> None:
        """Set a fixed current reading for *channel*."""
        self._channels[channel].measured_current = value

    # -- Private helpers ----------------------------------------------------

    def _handle_common_command(self, header: str) -> bool:
        """Handle IEEE 488.2 commands and ``SYST:ERR?``. Returns True if handled."""
        upper_header = header.upper()
        if upper_header == "*IDN?":
            self._response_buffer = self._config.identity
            return True
        if upper_header == "*OPC?":
            self._response_buffer = "1"
            return True
        if upper_header == "*RST":
            self._reset()
            return True
        if upper_header == "*CLS":
            self._error_queue.clear()
            return True
        if upper_header.endswith("?") and _normalize_header(header.rstrip("?")) == "SYST:ERR":
            self._response_buffer = self._pop_error()
            return True
        return False

    def _reset(self) -> None:
        # Remote/local is interface state and survives *RST.
        for state in self._channels.values():
            state.voltage_setpoint = 0.0
            state.current_limit = 0.0
            state.output_enabled = False
            state.measured_current = None
        self._selected = Channel.CH1
        self._output_enabled = False
        self._series = False
        self._parallel = False

    def _pop_error(self) -> str:
        if self._error_queue:
            code, msg = self._error_queue.pop(0)
            return f'{code},"{msg}"'
        return '0,"No error"'

    def _parameter_error(self) -> None:
        self._error_queue.append((-220, "Parameter error"))

    def _parse_state(self, args: str) -> bool | None:
        token = args.strip().upper()
        if token in _ON_TOKENS:
            return True
        if token in _OFF_TOKENS:
            return False
        self._parameter_error()
        return None

    def _parse_channel(self, token: str) -> Channel | None:
        try:
            return Channel(token.strip().upper())
        except ValueError:
            self._parameter_error()
            return None

    def _output_voltage(self, channel: Channel) -> float:
        state = self._channels[channel]
        if self._output_enabled and state.output_enabled:
            return state.voltage_setpoint
        return 0.0

    def _output_current(self, channel: Channel) -> float:
        measured = self._channels[channel].measured_current
        return measured if measured is not None else 0.0

    # -- Set handlers -------------------------------------------------------

    def _set_apply(self, args: str) -> None:
        """Parse ``APPL CH<n>, <v>, <i>``."""
        parts = [p.strip() for p in args.split(",")]
        if len(parts) != 3:
            self._parameter_error()
            return
        channel = self._parse_channel(parts[0])
        if channel is None:
            return
        try:
            voltage = float(parts[1])
            current = float(parts[2])
        except ValueError:
            self._parameter_error()
            return
        index = channel.number - 1
        if not 0 <= voltage <= self._config.max_voltage[index]:
            self._error_queue.append((-222, "Data out of range"))
            return
        if not 0 <= current <= self._config.max_current[index]:
            self._error_queue.append((-222, "Data out of range"))
            return
        state = self._channels[channel]
        state.voltage_setpoint = voltage
        state.current_limit = current

    def _set_output_enable(self, args: str) -> None:
        enabled = self._parse_state(args)
        if enabled is not None:
            self._output_enabled = enabled

    def _set_channel_output(self, args: str) -> None:
        enabled = self._parse_state(args)
        if enabled is not None:
            self._channels[self._selected].output_enabled = enabled

    def _set_selected(self, args: str) -> None:
        channel = self._parse_channel(args)
        if channel is not None:
            self._selected = channel

    def _set_local(self, args: str) -> None:
        self._remote = False

    def _set_remote(self, args: str) -> None:
        self._remote = True

    def _set_parallel(self, args: str) -> None:
        token = args.strip().upper()
        if token == "CH1CH2":
            self._parallel = True
        elif token in _OFF_TOKENS:
            self._parallel = False
        else:
            self._parameter_error()

    def _set_series(self, args: str) -> None:
        enabled = self._parse_state(args)
        if enabled is not None:
            self._series = enabled

    # -- Query handlers -----------------------------------------------------

    def _get_selected(self, args: str) -> str:
        return str(self._selected)

    def _get_output_enable(self, args: str) -> str:
        return "1" if self._output_enabled else "0"

    def _get_channel_output(self, args: str) -> str:
        return "1" if self._channels[self._selected].output_enabled else "0"

    def _get_series(self, args: str) -> str:
        return "1" if self._series else "0"

    def _fetch(self, args: str, reading: Callable[[Channel], float]) -> str:
        if args.strip().upper() == "ALL":
            return ",".join(f"{reading(ch):.4f}" for ch in Channel)
        channel = self._parse_channel(args) if args.strip() else self._selected
        if channel is None:
            return ""
        return f"{reading(channel):.4f}"

    def _fetch_voltage(self, args: str) -> str:
        return self._fetch(args, self._output_voltage)

    def _fetch_current(self, args: str) -> str:
        return self._fetch(args, self._output_current)

    def _fetch_power(self, args: str) -> str:
        return self._fetch(args, lambda ch: self._output_voltage(ch) * self._output_current(ch))


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------


def make_2230_emulator(serial: str = "9030123") -> Keithley2230Emulator:
    """Create a Keithley 2230-30-1 emulator.

    Args:
        serial: Serial number for the ``*IDN?`` response.

    Returns:
        Configured emulator instance (30 V / 3 A on channels 1 and 2,
        6 V / 5 A on channel 3).
    """
    config = Keithley2230EmulatorConfig(
        identity=f"Keithley instruments, 2230-30-1, {serial}, 1.16-1.04",
        max_voltage=(30.0, 30.0, 6.0),
        max_current=(3.0, 3.0, 5.0),
    )
    return Keithley2230Emulator(config)
