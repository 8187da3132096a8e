"""Tests for the Keithley 2230 emulator."""

from __future__ import annotations

import pytest

from benchpsu_keithley.emulator import (
    Keithley2230Emulator,
    Keithley2230EmulatorConfig,
    _normalize_header,
    make_2230_emulator,
)
from benchpsu_keithley.vocabulary import Channel

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _query(emu: Keithley2230Emulator, cmd: str) -> str:
    emu.write(cmd)
    return emu.read()


def _errors(emu: Keithley2230Emulator) -> list[str]:
    errors = []
    while True:
        err = _query(emu, "SYST:ERR?")
        if err == '0,"No error"':
            return errors
        errors.append(err)


class TestConfig:
    """Tests for Keithley2230EmulatorConfig validation."""

    def test_empty_identity_raises(self) -> None:
        with pytest.raises(ValueError, match="identity"):
            Keithley2230EmulatorConfig("", (30.0, 30.0, 6.0), (3.0, 3.0, 5.0))

    def test_non_positive_limits_raise(self) -> None:
        with pytest.raises(ValueError, match="max_voltage"):
            Keithley2230EmulatorConfig("x", (30.0, 0.0, 6.0), (3.0, 3.0, 5.0))
        with pytest.raises(ValueError, match="max_current"):
            Keithley2230EmulatorConfig("x", (30.0, 30.0, 6.0), (3.0, -1.0, 5.0))


class TestNormalizeHeader:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("INST", "INST"),
            (":INSTrument:SELect", "INST"),
            ("fetch:current", "FETC:CURR"),
            ("OUTPut:ENABle", "OUTP:ENAB"),
            ("CHANnel:OUTPut:STATe", "CHAN:OUTP"),
            ("SYSTem:REMote", "SYST:REM"),
        ],
    )
    def test_normalize(self, header: str, expected: str) -> None:
        assert _normalize_header(header) == expected


class TestCommon:
    def test_identity(self) -> None:
        assert _query(make_2230_emulator("42"), "*IDN?") == "Keithley instruments, 2230-30-1, 42, 1.16-1.04"

    def test_reset(self) -> None:
        emu = make_2230_emulator()
        emu.write("APPL CH2, 5.0, 1.0")
        emu.write("INST CH3")
        emu.write("OUTP:SER ON")
        emu.write("*RST")
        assert emu.setpoint(Channel.CH2) == (0.0, 0.0)
        assert emu.selected_channel is Channel.CH1
        assert not emu.series

    def test_reset_keeps_remote_state(self) -> None:
        emu = make_2230_emulator()
        emu.write("SYST:REM")
        emu.write("*RST")
        assert emu.remote

    def test_unknown_command_queues_error(self) -> None:
        emu = make_2230_emulator()
        emu.write("BOGUS:CMD 1")
        assert _errors(emu) == ['-113,"Undefined header"']

    def test_cls_clears_errors(self) -> None:
        emu = make_2230_emulator()
        emu.write("BOGUS")
        emu.write("*CLS")
        assert _errors(emu) == []


class TestSelection:
    def test_default_channel(self) -> None:
        assert _query(make_2230_emulator(), "INST?") == "CH1"

    def test_select(self) -> None:
        emu = make_2230_emulator()
        emu.write("INST CH3")
        assert _query(emu, "INST?") == "CH3"

    def test_select_long_form(self) -> None:
        emu = make_2230_emulator()
        emu.write("INSTrument:SELect CH2")
        assert emu.selected_channel is Channel.CH2

    def test_bad_channel_is_parameter_error(self) -> None:
        emu = make_2230_emulator()
        emu.write("INST CH4")
        assert emu.selected_channel is Channel.CH1
        assert _errors(emu) == ['-220,"Parameter error"']


class TestApply:
    def test_apply(self) -> None:
        emu = make_2230_emulator()
        emu.write("APPL CH3, 3.3, 2.5")
        assert emu.setpoint(Channel.CH3) == (3.3, 2.5)
        assert emu.selected_channel is Channel.CH1

    def test_out_of_range(self) -> None:
        emu = make_2230_emulator()
        emu.write("APPL CH3, 12.0, 1.0")
        assert emu.setpoint(Channel.CH3) == (0.0, 0.0)
        assert _errors(emu) == ['-222,"Data out of range"']

    @pytest.mark.parametrize("args", ["CH1, 5.0", "CH1, x, 1.0", "CHX, 1.0, 1.0"])
    def test_malformed(self, args: str) -> None:
        emu = make_2230_emulator()
        emu.write(f"APPL {args}")
        assert _errors(emu) == ['-220,"Parameter error"']


class TestOutputs:
    def test_channel_output_targets_selected(self) -> None:
        emu = make_2230_emulator()
        emu.write("INST CH2")
        emu.write("CHAN:OUTP ON")
        assert emu.channel_output(Channel.CH2)
        assert not emu.channel_output(Channel.CH1)
        assert _query(emu, "CHAN:OUTP?") == "1"

    def test_global_enable(self) -> None:
        emu = make_2230_emulator()
        emu.write("OUTP:ENAB 1")
        assert emu.output_enabled
        assert _query(emu, "OUTP:ENAB?") == "1"

    def test_bad_state(self) -> None:
        emu = make_2230_emulator()
        emu.write("OUTP:ENAB MAYBE")
        assert _errors(emu) == ['-220,"Parameter error"']


class TestCouplingAndControl:
    def test_parallel(self) -> None:
        emu = make_2230_emulator()
        emu.write("OUTP:PAR CH1CH2")
        assert emu.parallel
        emu.write("OUTP:PAR OFF")
        assert not emu.parallel

    def test_parallel_bad_group(self) -> None:
        emu = make_2230_emulator()
        emu.write("OUTP:PAR CH2CH3")
        assert _errors(emu) == ['-220,"Parameter error"']

    def test_series(self) -> None:
        emu = make_2230_emulator()
        emu.write("OUTP:SER ON")
        assert _query(emu, "OUTP:SER?") == "1"

    def test_remote_local(self) -> None:
        emu = make_2230_emulator()
        emu.write("SYST:REM")
        assert emu.remote
        emu.write("SYST:LOC")
        assert not emu.remote


class TestFetch:
    def _powered(self) -> Keithley2230Emulator:
        emu = make_2230_emulator()
        emu.write("APPL CH1, 5.0, 1.0")
        emu.write("APPL CH2, 12.0, 1.0")
        emu.write("OUTP:ENAB ON")
        emu.write("CHAN:OUTP ON")
        emu.set_measured_current(0.25, Channel.CH1)
        return emu

    def test_all_channels(self) -> None:
        emu = self._powered()
        assert _query(emu, "FETC:VOLT? ALL") == "5.0000,0.0000,0.0000"
        assert _query(emu, "FETC:CURR? ALL") == "0.2500,0.0000,0.0000"
        assert _query(emu, "FETC:POW? ALL") == "1.2500,0.0000,0.0000"

    def test_single_channel(self) -> None:
        emu = self._powered()
        assert _query(emu, "FETC:VOLT? CH1") == "5.0000"
        assert _query(emu, "FETC:VOLT?") == "5.0000"

    def test_output_off_reads_zero(self) -> None:
        emu = self._powered()
        emu.write("OUTP:ENAB OFF")
        assert _query(emu, "FETC:VOLT? ALL") == "0.0000,0.0000,0.0000"

    def test_read_clears_buffer(self) -> None:
        emu = self._powered()
        emu.write("FETC:VOLT? ALL")
        emu.read()
        assert emu.read() == ""


class TestClose:
    def test_close(self) -> None:
        emu = make_2230_emulator()
        emu.close()
        assert emu.closed
