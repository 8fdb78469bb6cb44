"""Discord REST client — the destination side of the synchronizer.

Only the handful of endpoints the synchronizer needs:
read channel history, send, edit and delete messages with one embed.
Rate-limited requests (HTTP 429) are retried after the delay Discord
asks for, a bounded number of times.
"""

import asyncio
import logging
from typing import Optional

import httpx

from ..media.errors import DestinationError
from ..media.models import Embed, Message

logger = logging.getLogger("gecko.clients.discord")

DEFAULT_API_URL = "https://discord.com/api/v10"

# Discord caps a single history request at 100 messages
_HISTORY_PAGE_SIZE = 100
_MAX_RATE_LIMIT_RETRIES = 5


def _retry_after(resp: httpx.Response) -> float:
    """Seconds to wait before retrying a rate-limited request.

    Read from the JSON body, else the Retry-After header, else 1s.
    """
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and "retry_after" in data:
        try:
            return float(data["retry_after"])
        except (TypeError, ValueError):
            pass
    try:
        return float(resp.headers.get("retry-after", 1))
    except ValueError:
        return 1.0


class DiscordClient:
    """Minimal async Discord bot client.

    Usage:
        async with DiscordClient(token) as discord:
            history = await discord.get_history(channel_id, 256)
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bot {token}",
                "User-Agent": "DiscordBot (https://geco.ethz.ch, 0.4)",
            },
        )

    async def __aenter__(self) -> "DiscordClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, waiting out rate limits. Raises DestinationError."""
        for attempt in range(_MAX_RATE_LIMIT_RETRIES + 1):
            try:
                resp = await self._client.request(method, path, **kwargs)
            except httpx.HTTPError as e:
                raise DestinationError(f"{method} {path} failed: {e}") from e

            if resp.status_code == 429 and attempt < _MAX_RATE_LIMIT_RETRIES:
                retry_after = _retry_after(resp)
                logger.info(f"Rate limited on {method} {path}, retrying in {retry_after:.2f}s")
                await asyncio.sleep(retry_after)
                continue

            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise DestinationError(
                    f"{method} {path} returned HTTP {resp.status_code}",
                    status_code=resp.status_code,
                ) from e
            return resp

        # Unreachable: the last attempt either returns or raises
        raise DestinationError(f"{method} {path} still rate limited", status_code=429)

    async def get_history(self, channel_id: str, limit: int) -> list[Message]:
        """Return up to `limit` most recent messages of a channel, newest first."""
        messages: list[Message] = []
        before: Optional[str] = None

        while len(messages) < limit:
            params = {"limit": min(_HISTORY_PAGE_SIZE, limit - len(messages))}
            if before:
                params["before"] = before
            resp = await self._request("GET", f"/channels/{channel_id}/messages", params=params)
            page = resp.json()
            if not page:
                break
            messages.extend(Message.from_dict(m) for m in page)
            if len(page) < params["limit"]:
                break
            before = messages[-1].id

        logger.debug(f"Read {len(messages)} messages from channel {channel_id}")
        return messages

    async def send(self, channel_id: str, embed: Embed) -> Message:
        resp = await self._request(
            "POST", f"/channels/{channel_id}/messages",
            json={"embeds": [embed.to_dict()]},
        )
        return Message.from_dict(resp.json())

    async def edit(self, message: Message, embed: Embed) -> Message:
        resp = await self._request(
            "PATCH", f"/channels/{message.channel_id}/messages/{message.id}",
            json={"embeds": [embed.to_dict()]},
        )
        return Message.from_dict(resp.json())

    async def delete(self, message: Message):
        """Delete a message. A message that is already gone counts as deleted."""
        try:
            await self._request("DELETE", f"/channels/{message.channel_id}/messages/{message.id}")
        except DestinationError as e:
            if e.status_code != 404:
                raise
            logger.warning(f"Message {message.id} was already deleted")
