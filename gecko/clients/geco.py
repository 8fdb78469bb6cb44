"""GECo website API client — the remote feed of news and event posts."""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from ..media.errors import FeedUnavailableError
from ..media.models import ChannelKind, RemoteItem

logger = logging.getLogger("gecko.clients.geco")

DEFAULT_API_URL = "https://geco.ethz.ch/api/v2/web"


class NewsPayload(BaseModel):
    id: int
    title: str
    description: str = ""
    url: str
    is_draft: bool = False
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    author_icon: Optional[str] = None
    footer: Optional[str] = None

    def to_item(self) -> RemoteItem:
        return RemoteItem(
            id=self.id,
            title=self.title,
            description=self.description,
            url=self.url,
            is_draft=self.is_draft,
            author_name=self.author_name,
            author_url=self.author_url,
            author_icon_url=self.author_icon,
            footer=self.footer,
        )


class EventPayload(BaseModel):
    """Events carry no author or footer on the website."""
    id: int
    title: str
    description: str = ""
    url: str
    is_draft: bool = False

    def to_item(self) -> RemoteItem:
        return RemoteItem(
            id=self.id,
            title=self.title,
            description=self.description,
            url=self.url,
            is_draft=self.is_draft,
        )


_PAYLOADS: dict[ChannelKind, type] = {
    ChannelKind.NEWS: NewsPayload,
    ChannelKind.EVENTS: EventPayload,
}


class GecoClient:
    """Read-only client for the website's news and event feeds."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"X-API-KEY": api_key, "Accept": "application/json"},
        )

    async def __aenter__(self) -> "GecoClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def fetch_items(self, kind: ChannelKind, page: int = 1) -> list[RemoteItem]:
        """Fetch one page of a feed, newest first.

        Raises:
            FeedUnavailableError: request failed or the payload is unusable
        """
        try:
            resp = await self._client.get(f"/{kind.value}", params={"page": page})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise FeedUnavailableError(f"Fetching {kind} page {page} failed: {e}") from e
        except ValueError as e:
            raise FeedUnavailableError(f"{kind} page {page} is not valid JSON") from e

        if not isinstance(data, list):
            raise FeedUnavailableError(f"{kind} page {page} has no post list")

        payload_cls = _PAYLOADS[kind]
        try:
            items = [payload_cls.model_validate(entry).to_item() for entry in data]
        except ValidationError as e:
            raise FeedUnavailableError(f"{kind} page {page} has malformed posts: {e}") from e

        logger.debug(f"Fetched {len(items)} remote {kind} posts (page {page})")
        return items
