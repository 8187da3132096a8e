"""Tests for ScpiConnection using a mock transport."""

from __future__ import annotations

from collections import deque

import pytest

from benchpsu_core.types import InstrumentIdentity
from benchpsu_scpi.connection import ScpiConnection, parse_idn_response
from benchpsu_scpi.errors import ScpiCommandError, ScpiInstrumentError

# ---------------------------------------------------------------------------
# Mock transport
# ---------------------------------------------------------------------------


class MockTransport:
    """In-memory transport that replays pre-loaded responses."""

    def __init__(self, responses: list[str] | None = None) -> None:
        self.responses: deque[str] = deque(responses or [])
        self.written: list[str] = []
        self.closed: bool = False

    def write(self, message: str) -> None:
        self.written.append(message)

    def read(self) -> str:
        return self.responses.popleft()

    def close(self) -> None:
        self.closed = True


def _no_error() -> str:
    return '0,"No error"'


class TestCommand:
    """Tests for ScpiConnection.command."""

    def test_default_sends_only_the_command(self) -> None:
        transport = MockTransport()
        conn = ScpiConnection(transport)
        conn.command("SYST:REM")
        assert transport.written == ["SYST:REM"]
        assert conn.check_errors is False

    def test_check_errors_drains_queue(self) -> None:
        transport = MockTransport([_no_error()])
        conn = ScpiConnection(transport, check_errors=True)
        conn.command("SYST:REM")
        assert transport.written == ["SYST:REM", "SYST:ERR?"]

    def test_error_raises_scpi_command_error(self) -> None:
        transport = MockTransport(['-100,"Command error"', _no_error()])
        conn = ScpiConnection(transport, check_errors=True)
        with pytest.raises(ScpiCommandError) as exc_info:
            conn.command("BAD:CMD")
        assert exc_info.value.errors == (ScpiInstrumentError(code=-100, message="Command error"),)

    def test_per_call_check_overrides_instance(self) -> None:
        transport = MockTransport([_no_error()])
        conn = ScpiConnection(transport)
        conn.command("SYST:LOC", check=True)
        assert "SYST:ERR?" in transport.written


class TestQuery:
    """Tests for ScpiConnection.query."""

    def test_returns_stripped_response(self) -> None:
        transport = MockTransport(["  CH2 \n"])
        conn = ScpiConnection(transport)
        assert conn.query("INST?") == "CH2"
        assert transport.written == ["INST?"]

    def test_error_after_query_raises(self) -> None:
        transport = MockTransport(["CH1", '-113,"Undefined header"', _no_error()])
        conn = ScpiConnection(transport, check_errors=True)
        with pytest.raises(ScpiCommandError, match="-113"):
            conn.query("INST?")


class TestGetErrors:
    """Tests for ScpiConnection.get_errors."""

    def test_no_errors(self) -> None:
        conn = ScpiConnection(MockTransport([_no_error()]))
        assert conn.get_errors() == ()

    def test_multiple_errors_drained(self) -> None:
        transport = MockTransport(['-100,"Command error"', '-222,"Data out of range"', _no_error()])
        errors = ScpiConnection(transport).get_errors()
        assert [e.code for e in errors] == [-100, -222]

    def test_unquoted_message(self) -> None:
        conn = ScpiConnection(MockTransport(["-100,Command error", _no_error()]))
        assert conn.get_errors()[0].message == "Command error"

    def test_plus_sign_prefix(self) -> None:
        conn = ScpiConnection(MockTransport(['+0,"No error"']))
        assert conn.get_errors() == ()


class TestIdentity:
    """Tests for identify and get_identity."""

    def test_get_identity(self) -> None:
        transport = MockTransport(["Keithley instruments, 2230-30-1, 9030123, 1.16-1.04"])
        identity = ScpiConnection(transport).get_identity()
        assert transport.written == ["*IDN?"]
        assert identity == InstrumentIdentity(
            manufacturer="Keithley instruments",
            model="2230-30-1",
            serial="9030123",
            firmware="1.16-1.04",
        )

    def test_close_delegates_to_transport(self) -> None:
        transport = MockTransport()
        ScpiConnection(transport).close()
        assert transport.closed is True


class TestParseIdnResponse:
    """Tests for parse_idn_response."""

    def test_extra_fields_joined_as_firmware(self) -> None:
        assert parse_idn_response("Mfr,Model,SN1,FW1,FW2").firmware == "FW1,FW2"

    def test_too_few_fields_raises(self) -> None:
        with pytest.raises(ValueError, match="at least 4"):
            parse_idn_response("Only,Two,Fields")


class TestScpiCommandErrorFormatting:
    """Tests for ScpiCommandError string representation."""

    def test_multiple_errors_message(self) -> None:
        err = ScpiCommandError(
            (
                ScpiInstrumentError(code=-100, message="Command error"),
                ScpiInstrumentError(code=-200, message="Execution error"),
            )
        )
        assert str(err) == 'SCPI instrument error(s): -100,"Command error"; -200,"Execution error"'
