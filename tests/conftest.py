"""Pytest configuration and shared fixtures."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from gecko.media.models import Message


@pytest.fixture
def discord():
    """Destination double: send/edit echo back a message carrying the embed."""
    client = MagicMock()
    client.get_history = AsyncMock(return_value=[])
    client.send = AsyncMock(
        side_effect=lambda channel_id, embed: Message(id="m-new", channel_id=channel_id, embeds=[embed])
    )
    client.edit = AsyncMock(
        side_effect=lambda message, embed: Message(id=message.id, channel_id=message.channel_id, embeds=[embed])
    )
    client.delete = AsyncMock()
    return client


@pytest.fixture
def feed():
    """Remote feed double returning no items unless told otherwise."""
    source = MagicMock()
    source.fetch_items = AsyncMock(return_value=[])
    return source
