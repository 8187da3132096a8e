"""Shared value types for benchpsu packages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InstrumentIdentity:
    """Instrument identification metadata.

    Represents the four standard fields returned by the SCPI ``*IDN?`` query.
    Used during discovery to decide whether an open session belongs to the
    requested instrument.

    Attributes:
        manufacturer: Instrument manufacturer name (e.g., "Keithley instruments").
        model: Instrument model number or name (e.g., "2230-30-1").
        serial: Serial number string.
        firmware: Firmware or hardware version string.

    Example:
        >>> identity = InstrumentIdentity(
        ...     manufacturer="Keithley instruments",
        ...     model="2230-30-1",
        ...     serial="9030123",
        ...     firmware="1.16-1.04"
        ... )
    """

    manufacturer: str
    model: str
    serial: str
    firmware: str

    def matches(self, manufacturer: str, model: str) -> bool:
        """Check whether this identity belongs to the given instrument family.

        The manufacturer must be a case-insensitive prefix of the reported
        manufacturer and the model a case-insensitive substring of the
        reported model, so ``("Keithley Instrument", "2230")`` matches
        ``Keithley instruments, 2230-30-1``.

        Args:
            manufacturer: Expected manufacturer prefix.
            model: Expected model fragment.

        Returns:
            True if both fields match.
        """
        return self.manufacturer.lower().startswith(
            manufacturer.lower()
        ) and model.lower() in self.model.lower()
