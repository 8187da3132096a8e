"""Command strings for the Keithley 2230 series.

Pure functions and constants; every string here goes to the instrument
exactly as built, so spacing and separators must not change.
"""

from __future__ import annotations

from benchpsu_scpi.number import format_number

from benchpsu_keithley.models import ChannelSetting
from benchpsu_keithley.vocabulary import Channel, OutputState, Parallel, Series

QUERY_CHANNEL = "INST?"
LOCAL = "SYST:LOC"
REMOTE = "SYST:REM"
FETCH_CURRENT = "FETC:CURR? ALL"
FETCH_VOLTAGE = "FETC:VOLT? ALL"
FETCH_POWER = "FETC:POW? ALL"

_PARALLEL_TOKENS: dict[Parallel, str] = {
    Parallel.ON: "CH1CH2",
    Parallel.OFF: "OFF",
}


def apply(channel: Channel, voltage: float, current: float) -> str:
    """``APPL <CH>, <voltage>, <current>``"""
    return f"APPL {channel}, {format_number(voltage)}, {format_number(current)}"


def apply_setting(setting: ChannelSetting) -> str:
    return apply(setting.channel, setting.voltage, setting.current)


def output_enable(state: OutputState) -> str:
    """Global output enable, ``OUTP:ENAB <STATE>``."""
    return f"OUTP:ENAB {state}"


def channel_output(state: OutputState) -> str:
    """Output of the currently selected channel, ``CHAN:OUTP <STATE>``."""
    return f"CHAN:OUTP {state}"


def select_channel(channel: Channel) -> str:
    return f"INST {channel}"


def parallel(mode: Parallel) -> str:
    return f"OUTP:PAR {_PARALLEL_TOKENS[mode]}"


def series(mode: Series) -> str:
    return f"OUTP:SER {mode}"
