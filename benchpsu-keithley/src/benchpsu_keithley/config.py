"""YAML configuration loading for Keithley 2230 supplies.

Example YAML configuration:
    instrument:
      visa_address: "USB0::0x05E6::0x2230::9030123::INSTR"
      timeout_ms: 5000
      strict: false
      channels:
        - id: 1
          logical_name: "main_battery"
          max_voltage: 15.0
          max_current: 2.0
        - id: 3
          logical_name: "logic_rail"

``visa_address`` may be left out, in which case the supply is discovered by
``manufacturer`` and ``model`` (defaults ``"Keithley Instrument"`` and
``"2230"``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from benchpsu_core.errors import ConfigError

from benchpsu_keithley.psu import MANUFACTURER, MODEL, create_instrument
from benchpsu_keithley.psu_channel import (
    Keithley2230MultiChannel,
    PsuChannelConfig,
    parse_channel_configs,
)


@dataclass(frozen=True)
class PsuConfig:
    """Connection and channel settings for one supply.

    Attributes:
        visa_address: VISA resource string, or None to discover the supply.
        manufacturer: Manufacturer prefix used for discovery.
        model: Model fragment used for discovery.
        timeout_ms: VISA I/O timeout in milliseconds.
        strict: Parse measurement responses strictly.
        channels: Logical channel configurations.
    """

    visa_address: str | None = None
    manufacturer: str = MANUFACTURER
    model: str = MODEL
    timeout_ms: int = 5000
    strict: bool = False
    channels: tuple[PsuChannelConfig, ...] = field(default_factory=tuple)


def parse_config(data: Any) -> PsuConfig:
    """Build a :class:`PsuConfig` from already-loaded YAML data.

    Raises:
        ConfigError: If the data is structurally invalid.
    """
    if not isinstance(data, dict):
        raise ConfigError("Config must be a YAML mapping")

    section = data.get("instrument")
    if not isinstance(section, dict):
        raise ConfigError("Missing required mapping: instrument")

    visa_address = section.get("visa_address")
    if visa_address is not None and not isinstance(visa_address, str):
        raise ConfigError("instrument.visa_address must be a string")

    timeout_ms = section.get("timeout_ms", 5000)
    if not isinstance(timeout_ms, int) or isinstance(timeout_ms, bool) or timeout_ms <= 0:
        raise ConfigError("instrument.timeout_ms must be a positive integer")

    strict = section.get("strict", False)
    if not isinstance(strict, bool):
        raise ConfigError("instrument.strict must be true or false")

    channels_data = section.get("channels", [])
    if not isinstance(channels_data, list) or not all(isinstance(c, dict) for c in channels_data):
        raise ConfigError("instrument.channels must be a list of mappings")
    try:
        channels = parse_channel_configs(channels_data)
    except KeyError as exc:
        raise ConfigError(f"Channel missing required field: {exc.args[0]}") from exc
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    names = [c.logical_name for c in channels]
    if len(set(names)) != len(names):
        raise ConfigError("Channel logical names must be unique")
    ids = [c.id for c in channels]
    if len(set(ids)) != len(ids):
        raise ConfigError("Channel ids must be unique")

    return PsuConfig(
        visa_address=visa_address,
        manufacturer=str(section.get("manufacturer", MANUFACTURER)),
        model=str(section.get("model", MODEL)),
        timeout_ms=timeout_ms,
        strict=strict,
        channels=channels,
    )


def load_config(path: str | Path) -> PsuConfig:
    """Load supply configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigError: If the config is invalid or missing required fields.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    return parse_config(data)


def create_from_config(config: PsuConfig) -> Keithley2230MultiChannel:
    """Open the supply described by *config*.

    The driver is closed again if the channel wrapper cannot be built.
    """
    psu = create_instrument(
        config.visa_address,
        manufacturer=config.manufacturer,
        model=config.model,
        timeout_ms=config.timeout_ms,
        strict=config.strict,
    )
    try:
        return Keithley2230MultiChannel(psu, config.channels)
    except ValueError:
        psu.close()
        raise
