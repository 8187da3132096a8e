"""Keithley 2230 channel wrapper for logical naming.

This module provides a per-channel interface to a Keithley 2230, allowing
test code to interact with individual outputs by logical name. All channels
of one supply share a lock, so the select/switch/restore sequence behind
:meth:`Keithley2230Channel.set_output` cannot interleave with another
channel's commands.

Example:
    psu = create_multichannel_instrument(
        visa_address="USB0::0x05E6::0x2230::9030123::INSTR",
        channels=[
            {"id": 1, "logical_name": "main_battery", "max_voltage": 15.0},
            {"id": 3, "logical_name": "logic_rail"},
        ],
    )

    battery = psu.get_channel_by_name("main_battery")
    battery.apply(12.0, 1.5)
    battery.set_output(True)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from benchpsu_core import InstrumentIdentity

from benchpsu_keithley.psu import MANUFACTURER, MODEL, Keithley2230, create_instrument
from benchpsu_keithley.vocabulary import Channel, OutputState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PsuChannelConfig:
    """Configuration for a supply channel.

    Args:
        id: Physical channel number (1-3).
        logical_name: Logical name for this channel.
        max_voltage: Optional maximum voltage accepted by :meth:`Keithley2230Channel.apply`.
        max_current: Optional maximum current accepted by :meth:`Keithley2230Channel.apply`.
    """

    id: int
    logical_name: str
    max_voltage: float | None = None
    max_current: float | None = None

    def __post_init__(self) -> None:
        if (
            not isinstance(self.id, int)
            or isinstance(self.id, bool)
            or self.id not in (ch.number for ch in Channel)
        ):
            raise ValueError(f"Channel id must be 1, 2 or 3, got {self.id!r}")
        if not isinstance(self.logical_name, str) or not self.logical_name:
            raise ValueError("logical_name must be non-empty")
        for name in ("max_voltage", "max_current"):
            limit = getattr(self, name)
            if limit is None:
                continue
            if not isinstance(limit, (int, float)) or isinstance(limit, bool):
                raise ValueError(f"{name} must be a number, got {limit!r}")
            if limit <= 0:
                raise ValueError(f"{name} must be > 0, got {limit!r}")

    @property
    def channel(self) -> Channel:
        return Channel(self.id)


class Keithley2230Channel:
    """A single output of a Keithley 2230.

    Args:
        psu: The underlying driver.
        config: Channel configuration.
        lock: Lock shared across all channels of this supply.
    """

    def __init__(
        self,
        psu: Keithley2230,
        config: PsuChannelConfig,
        lock: threading.Lock,
    ) -> None:
        self._psu = psu
        self._config = config
        self._channel = config.channel
        self._lock = lock

    @property
    def logical_name(self) -> str:
        """The logical name of this channel."""
        return self._config.logical_name

    @property
    def channel(self) -> Channel:
        """The physical channel on the instrument."""
        return self._channel

    # -- Setpoint commands --

    def apply(self, voltage: float, current: float) -> None:
        """Set voltage and current limit in a single command.

        Raises:
            ValueError: If a value exceeds the configured limit.
        """
        if self._config.max_voltage is not None and voltage > self._config.max_voltage:
            raise ValueError(
                f"Voltage {voltage}V exceeds limit {self._config.max_voltage}V "
                f"for channel '{self._config.logical_name}'"
            )
        if self._config.max_current is not None and current > self._config.max_current:
            raise ValueError(
                f"Current {current}A exceeds limit {self._config.max_current}A "
                f"for channel '{self._config.logical_name}'"
            )

        with self._lock:
            self._psu.set_channel(self._channel, voltage, current)
            logger.debug(
                "Applied to '%s' (%s): %.3fV, %.3fA",
                self._config.logical_name,
                self._channel,
                voltage,
                current,
            )

    def set_output(self, enabled: bool) -> None:
        """Switch this channel's output on or off.

        Leaves the instrument's selected channel as it was.
        """
        with self._lock:
            self._psu.enable_channel(self._channel, OutputState.from_bool(enabled))
            logger.debug(
                "Set output on '%s' (%s): %s",
                self._config.logical_name,
                self._channel,
                "ON" if enabled else "OFF",
            )

    # -- Measurements --

    def measure_voltage(self) -> float:
        """Measure the output voltage in volts."""
        with self._lock:
            return self._psu.read_voltage()[self._channel.number - 1]

    def measure_current(self) -> float:
        """Measure the output current in amps."""
        with self._lock:
            return self._psu.read_current()[self._channel.number - 1]

    def measure_power(self) -> float:
        """Measure the output power in watts."""
        with self._lock:
            return self._psu.read_power()[self._channel.number - 1]


class Keithley2230MultiChannel:
    """Multi-channel wrapper for a Keithley 2230.

    Provides access to individual channels by number or logical name.

    Args:
        psu: The underlying driver.
        channels: Channel configurations with logical names.

    Raises:
        ValueError: If a channel id or logical name appears twice.
    """

    def __init__(
        self,
        psu: Keithley2230,
        channels: tuple[PsuChannelConfig, ...],
    ) -> None:
        self._psu = psu
        self._lock = threading.Lock()
        self._channels_by_id: dict[int, Keithley2230Channel] = {}
        self._channels_by_name: dict[str, Keithley2230Channel] = {}

        for config in channels:
            if config.id in self._channels_by_id:
                raise ValueError(f"Channel {config.id} configured more than once")
            if config.logical_name in self._channels_by_name:
                raise ValueError(f"Logical name '{config.logical_name}' used more than once")
            channel = Keithley2230Channel(psu, config, self._lock)
            self._channels_by_id[config.id] = channel
            self._channels_by_name[config.logical_name] = channel

    @property
    def psu(self) -> Keithley2230:
        """The underlying driver, for whole-supply operations."""
        return self._psu

    @property
    def lock(self) -> threading.Lock:
        """Lock to hold while using :attr:`psu` directly."""
        return self._lock

    def get_identity(self) -> InstrumentIdentity:
        """Get the instrument identity."""
        with self._lock:
            return self._psu.get_identity()

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._psu.close()

    def get_channel(self, channel_id: int) -> Keithley2230Channel:
        """Get a channel interface by physical channel number.

        Raises:
            KeyError: If the channel is not configured.
        """
        if channel_id not in self._channels_by_id:
            raise KeyError(f"Channel {channel_id} not configured")
        return self._channels_by_id[channel_id]

    def get_channel_by_name(self, logical_name: str) -> Keithley2230Channel | None:
        """Get a channel interface by logical name, or None if not registered."""
        return self._channels_by_name.get(logical_name)

    def list_channels(self) -> list[Keithley2230Channel]:
        return list(self._channels_by_id.values())

    def list_logical_names(self) -> list[str]:
        return list(self._channels_by_name.keys())


def parse_channel_configs(channels: list[dict[str, Any]]) -> tuple[PsuChannelConfig, ...]:
    """Build channel configurations from plain mappings.

    Each mapping needs ``id`` and ``logical_name`` and may carry
    ``max_voltage`` and ``max_current``.

    Raises:
        ValueError: If an id is not a channel of the supply.
        KeyError: If a required key is missing.
    """
    return tuple(
        PsuChannelConfig(
            id=ch["id"],
            logical_name=ch["logical_name"],
            max_voltage=ch.get("max_voltage"),
            max_current=ch.get("max_current"),
        )
        for ch in channels
    )


def create_multichannel_instrument(
    visa_address: str | None = None,
    channels: list[dict[str, Any]] | None = None,
    *,
    manufacturer: str = MANUFACTURER,
    model: str = MODEL,
    timeout_ms: int = 5000,
    strict: bool = False,
) -> Keithley2230MultiChannel:
    """Create a multi-channel Keithley 2230 with logical naming.

    Args:
        visa_address: VISA resource string; discovered when omitted.
        channels: List of channel configs, each with:
            - id: Physical channel number (1-3)
            - logical_name: Logical name for the channel
            - max_voltage: Optional voltage limit
            - max_current: Optional current limit
        manufacturer: Manufacturer prefix used for discovery.
        model: Model fragment used for discovery.
        timeout_ms: VISA I/O timeout.
        strict: Parse measurement responses strictly.

    Returns:
        Configured Keithley2230MultiChannel instance.
    """
    channel_configs = parse_channel_configs(channels or [])
    psu = create_instrument(
        visa_address,
        manufacturer=manufacturer,
        model=model,
        timeout_ms=timeout_ms,
        strict=strict,
    )
    try:
        return Keithley2230MultiChannel(psu, channel_configs)
    except ValueError:
        psu.close()
        raise
