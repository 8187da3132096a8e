"""Keithley 2230 triple-channel DC power supply driver and emulator.

Modules:
    vocabulary: Channels, output states and coupling modes with their wire tokens.
    commands: Exact command strings sent to the instrument.
    parser: Measurement response parsing (lenient or strict).
    channel_state: Selected-channel query/select/restore handling.
    psu: High-level driver.
    psu_channel: Per-channel wrapper with logical naming and a shared lock.
    config: YAML configuration.
    emulator: In-process SCPI emulator for testing without hardware.

Example:
    Connect to a real instrument::

        from benchpsu_keithley import Channel, OutputState, create_instrument

        with create_instrument() as psu:
            psu.set_channel(Channel.CH1, 5.0, 0.5)
            psu.enable_output(OutputState.ON)
            psu.enable_channel(Channel.CH1, OutputState.ON)
            print(psu.read_all())

    Use an emulator for testing::

        from benchpsu_keithley import Keithley2230, make_2230_emulator
        from benchpsu_scpi import ScpiConnection

        psu = Keithley2230(ScpiConnection(make_2230_emulator()))
"""

from benchpsu_keithley.channel_state import ChannelSelector
from benchpsu_keithley.config import PsuConfig, create_from_config, load_config, parse_config
from benchpsu_keithley.emulator import (
    Keithley2230Emulator,
    Keithley2230EmulatorConfig,
    make_2230_emulator,
)
from benchpsu_keithley.models import ChannelReading, ChannelSetting, Measurement
from benchpsu_keithley.parser import parse_triple
from benchpsu_keithley.psu import MANUFACTURER, MODEL, Keithley2230, create_instrument
from benchpsu_keithley.psu_channel import (
    Keithley2230Channel,
    Keithley2230MultiChannel,
    PsuChannelConfig,
    create_multichannel_instrument,
)
from benchpsu_keithley.vocabulary import (
    Channel,
    OutputState,
    Parallel,
    Series,
    parse_channel,
    parse_state,
)

__all__ = [
    # Vocabulary
    "Channel",
    "OutputState",
    "Parallel",
    "Series",
    "parse_channel",
    "parse_state",
    # Models
    "ChannelReading",
    "ChannelSetting",
    "Measurement",
    # Parsing
    "parse_triple",
    # Driver
    "ChannelSelector",
    "Keithley2230",
    "MANUFACTURER",
    "MODEL",
    "create_instrument",
    # Multi-channel driver with logical naming
    "Keithley2230Channel",
    "Keithley2230MultiChannel",
    "PsuChannelConfig",
    "create_multichannel_instrument",
    # Configuration
    "PsuConfig",
    "create_from_config",
    "load_config",
    "parse_config",
    # Emulator
    "Keithley2230Emulator",
    "Keithley2230EmulatorConfig",
    "make_2230_emulator",
]
