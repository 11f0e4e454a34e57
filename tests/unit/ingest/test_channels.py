"""Unit tests for pipeline channels."""

from __future__ import annotations

import threading
import time

import pytest

from core.errors import ChannelClosedError
from core.types import ParseError, SourceRow
from ingest.channels import PipelineChannels, select


def test_rendezvous_send_blocks_until_received() -> None:
    """An unbuffered send should return only after the receiver took the item."""
    channels = PipelineChannels()
    delivered = threading.Event()

    def produce() -> None:
        channels.rows.send(SourceRow(line_number=2, fields=("1",)))
        delivered.set()

    producer = threading.Thread(target=produce)
    producer.start()
    blocked_before_receive = not delivered.wait(0.1)
    selection = channels.rows.receive(timeout=1.0)
    producer.join(1.0)

    assert blocked_before_receive
    assert selection is not None and selection.item == SourceRow(line_number=2, fields=("1",))
    assert delivered.is_set()


def test_buffered_channel_accepts_sends_up_to_capacity() -> None:
    """The error channel should queue items without a receiver."""
    channels = PipelineChannels(error_buffer_size=2)

    channels.errors.send(ParseError(kind="row", message="first"))
    channels.errors.send(ParseError(kind="row", message="second"))

    assert [error.message for error in channels.errors.drain()] == ["first", "second"]


def test_closed_channel_delivers_queued_items_then_reports_closed() -> None:
    """Items queued before close should still be received."""
    channels = PipelineChannels()
    channels.errors.send(ParseError(kind="row", message="late"))
    channels.errors.close()

    first = channels.errors.receive(timeout=0.1)
    second = channels.errors.receive(timeout=0.1)

    assert first is not None and first.ok and first.item.message == "late"
    assert second is not None and second.ok is False and second.item is None


def test_send_on_closed_channel_raises() -> None:
    """Cancelled channels should refuse new items."""
    channels = PipelineChannels()
    channels.cancel()

    with pytest.raises(ChannelClosedError):
        channels.rows.send(SourceRow(line_number=2, fields=()))
    with pytest.raises(ChannelClosedError):
        channels.errors.send(ParseError(kind="row", message="dropped"))


def test_select_returns_none_on_timeout() -> None:
    """A wait with nothing ready should expire."""
    channels = PipelineChannels()
    started = time.monotonic()

    selection = select([channels.rows, channels.errors], 0.05)

    assert selection is None
    assert time.monotonic() - started >= 0.04


def test_select_prefers_earlier_channels() -> None:
    """When several channels are ready, the first listed one wins."""
    channels = PipelineChannels()
    channels.errors.send(ParseError(kind="row", message="pending"))
    channels.header.close()

    selection = select([channels.errors, channels.header], 0.1)

    assert selection is not None and selection.channel is channels.errors


def test_select_rejects_channels_from_different_groups() -> None:
    """Channels without a shared condition cannot be waited on together."""
    first = PipelineChannels()
    second = PipelineChannels()

    with pytest.raises(ValueError):
        select([first.rows, second.errors], 0.01)
