"""Value types exchanged with the Keithley 2230 driver."""

from __future__ import annotations

from dataclasses import dataclass

from benchpsu_keithley.vocabulary import Channel


@dataclass(frozen=True)
class ChannelSetting:
    """Voltage and current setpoints for one channel, sent as one ``APPL``.

    Values are passed to the instrument as given; range checking is left to
    the device.

    Attributes:
        channel: Target channel.
        voltage: Voltage setpoint in volts.
        current: Current limit in amps.
    """

    channel: Channel
    voltage: float
    current: float


@dataclass(frozen=True)
class ChannelReading:
    """Measured output of one channel.

    Attributes:
        voltage: Output voltage in volts.
        current: Output current in amps.
        power: Output power in watts.
    """

    voltage: float
    current: float
    power: float


@dataclass(frozen=True)
class Measurement:
    """Readings of all three channels.

    Built from three separate fetch round-trips, so the readings are not
    guaranteed to come from the same instant.
    """

    ch1: ChannelReading
    ch2: ChannelReading
    ch3: ChannelReading

    @classmethod
    def from_triples(
        cls,
        voltages: tuple[float, float, float],
        currents: tuple[float, float, float],
        powers: tuple[float, float, float],
    ) -> Measurement:
        """Combine per-quantity triples (channel order 1, 2, 3) into readings."""
        readings = [ChannelReading(v, i, p) for v, i, p in zip(voltages, currents, powers)]
        return cls(ch1=readings[0], ch2=readings[1], ch3=readings[2])

    def for_channel(self, channel: Channel) -> ChannelReading:
        """Return the reading of *channel*."""
        readings = {Channel.CH1: self.ch1, Channel.CH2: self.ch2, Channel.CH3: self.ch3}
        return readings[channel]
