"""Selected-channel handling for the Keithley 2230.

Several commands act on "the currently selected channel", a register that
only exists on the instrument. :class:`ChannelSelector` reads and writes that
register and provides :meth:`ChannelSelector.selected`, which runs a block of
commands against another channel and then puts the previous selection back.

The selection is never cached here; every lookup is a round-trip.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from benchpsu_scpi import ScpiConnection

from benchpsu_keithley import commands
from benchpsu_keithley.vocabulary import Channel, parse_channel

logger = logging.getLogger(__name__)


class ChannelSelector:
    """Reads, writes and temporarily overrides the instrument's selected channel.

    Args:
        connection: Connection to the instrument.
    """

    def __init__(self, connection: ScpiConnection) -> None:
        self._conn = connection

    def current(self) -> Channel:
        """Query the selected channel (``INST?``).

        Raises:
            ProtocolDecodeError: If the instrument answers with an unknown token.
        """
        return parse_channel(self._conn.query(commands.QUERY_CHANNEL))

    def select(self, channel: Channel) -> None:
        """Select *channel* (``INST <CH>``)."""
        self._conn.command(commands.select_channel(channel))

    @contextmanager
    def selected(self, channel: Channel) -> Iterator[Channel]:
        """Select *channel* for the duration of the block, then restore.

        Steps: query the current selection, select *channel*, run the block,
        re-select the channel found in the first step. The previous channel
        is yielded.

        A failure in any step, the block included, propagates at once and no
        later step runs. In particular the previous selection is not restored,
        so after an error the instrument may still have *channel* selected.

        Not atomic with respect to other users of the same connection; callers
        sharing a driver between threads must hold a lock around the block.
        """
        previous = self.current()
        logger.debug("Selecting %s (previously %s)", channel, previous)
        self.select(channel)
        yield previous
        logger.debug("Restoring selection %s", previous)
        self.select(previous)
