"""Media synchronizer — keeps the Discord news and event channels in sync.

One MediaSynchronizer owns, per channel kind, the Discord channel id,
the local index and a lock. A pass for one kind:

1. Fetch page 1 of the remote feed (abort before touching Discord if
   that fails or the page is empty)
2. Rebuild the local index from the channel history, deleting
   messages that aren't news or event posts
3. Merge feed and index (see reconcile.py) and apply the result

Passes, manual upserts and deletes for the same kind are serialized
by the kind's lock. A failing Discord call aborts the pass; whatever
was already applied stays applied and the next pass starts over from
a fresh index.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Optional

from .errors import FeedUnavailableError, PostNotFoundError
from .index import LocalIndex, build_index, post_url_pattern
from .models import ChannelKind, Embed, LocalPost, Message
from .reconcile import Action, Create, NoOp, Update, Warn, ascending_feed, reconcile
from .transcoder import BASE_URL, DESCRIPTION_LIMIT, transcode

logger = logging.getLogger("gecko.media.synchronizer")

# How many messages of a channel are read when rebuilding the index
DEFAULT_HISTORY_LIMIT = 256


@dataclass
class SyncReport:
    """Outcome of one pass over one channel kind."""
    kind: ChannelKind
    remote: int = 0
    local: int = 0
    removed: int = 0
    created: list[int] = field(default_factory=list)
    updated: list[int] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)
    missing: list[int] = field(default_factory=list)


class MediaSynchronizer:
    """Per-process synchronization context.

    Args:
        feed: Remote feed source with `fetch_items(kind, page)`
        discord: Destination with `get_history`, `send`, `edit`, `delete`
        channels: Discord channel id per channel kind. Kinds without a
            channel are not synchronized.
        site_url: Website origin, prepended to author icon paths. Its host
            is the one post URLs are recognized on.
        history_limit: Messages read per channel when indexing
        max_length: Embed description limit
    """

    def __init__(
        self,
        feed,
        discord,
        channels: dict[ChannelKind, str],
        site_url: str = BASE_URL,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        max_length: int = DESCRIPTION_LIMIT,
    ):
        self._feed = feed
        self._discord = discord
        self._channels = dict(channels)
        self._history_limit = history_limit
        self._transcode = partial(transcode, base_url=site_url, max_length=max_length)
        self._post_url_re = post_url_pattern(site_url)
        self._indexes = {kind: LocalIndex() for kind in self._channels}
        self._locks = {kind: asyncio.Lock() for kind in self._channels}

    @property
    def kinds(self) -> list[ChannelKind]:
        return list(self._channels)

    def index(self, kind: ChannelKind) -> LocalIndex:
        self._channel(kind)
        return self._indexes[kind]

    def _channel(self, kind: ChannelKind) -> str:
        try:
            return self._channels[kind]
        except KeyError:
            raise ValueError(f"No Discord channel configured for {kind}") from None

    # ── Index ──

    async def _rebuild_index(self, kind: ChannelKind, report: Optional[SyncReport] = None) -> LocalIndex:
        channel_id = self._channel(kind)
        history = await self._discord.get_history(channel_id, self._history_limit)

        async def _delete(message: Message):
            await self._discord.delete(message)
            if report is not None:
                report.removed += 1

        index = await build_index(history, _delete, self._post_url_re)
        self._indexes[kind] = index
        logger.debug(f"Found {len(index)} local {kind} posts: {' '.join(str(i) for i in index.ids())}")
        return index

    async def refresh_index(self, kind: ChannelKind) -> LocalIndex:
        """Re-read the channel history into the local index."""
        async with self._locks[kind]:
            return await self._rebuild_index(kind)

    # ── Full pass ──

    async def sync(self, kind: ChannelKind) -> SyncReport:
        """Run one reconciliation pass for a channel kind.

        Raises:
            FeedUnavailableError: the feed could not be read or is empty;
                Discord untouched
            DestinationError: a Discord call failed; the pass is aborted
        """
        self._channel(kind)
        async with self._locks[kind]:
            logger.info(f"Updating {kind} channel.")
            report = SyncReport(kind=kind)

            items = await self._feed.fetch_items(kind, 1)
            if not items:
                raise FeedUnavailableError(f"The {kind} feed returned no posts")
            index = await self._rebuild_index(kind, report)

            published = ascending_feed(items)
            report.remote = len(published)
            report.local = len(index)
            logger.info(f"Found {len(published)} remote and {len(index)} local {kind} posts.")

            for action in reconcile(published, index, self._transcode):
                await self._apply(kind, action, report)

            logger.info(
                f"{kind} sync done: {len(report.created)} created, {len(report.updated)} updated, "
                f"{len(report.unchanged)} unchanged, {len(report.missing)} missing, "
                f"{report.removed} removed"
            )
            return report

    async def _apply(self, kind: ChannelKind, action: Action, report: SyncReport):
        index = self._indexes[kind]
        if isinstance(action, Create):
            message = await self._discord.send(self._channels[kind], action.embed)
            index.put(LocalPost(post_id=action.item.id, message=message))
            report.created.append(action.item.id)
        elif isinstance(action, Update):
            message = await self._discord.edit(action.post.message, action.embed)
            index.put(LocalPost(post_id=action.post.post_id, message=message))
            report.updated.append(action.post.post_id)
        elif isinstance(action, NoOp):
            report.unchanged.append(action.post_id)
        elif isinstance(action, Warn):
            report.missing.append(action.post_id)

    async def sync_all(self) -> dict[ChannelKind, SyncReport]:
        """Run a pass for every configured kind, one after the other."""
        return {kind: await self.sync(kind) for kind in self._channels}

    # ── Manual upsert / delete ──

    async def set_post(self, kind: ChannelKind, post_id: int, embed: Embed, raw: bool = True) -> Message:
        """Add or edit (if already posted) a post.

        Args:
            kind: Channel kind
            post_id: Website id of the post
            embed: The post's embed
            raw: If True, the embed is transcoded first
        """
        channel_id = self._channel(kind)
        if raw:
            embed = self._transcode(embed)

        async with self._locks[kind]:
            index = self._indexes[kind]
            existing = index.get(post_id)
            if existing is not None:
                message = await self._discord.edit(existing.message, embed)
                logger.info(f"Edited {kind} post {post_id}")
            else:
                message = await self._discord.send(channel_id, embed)
                logger.info(f"Posted {kind} post {post_id}")
            index.put(LocalPost(post_id=post_id, message=message))
            return message

    async def delete_post(self, kind: ChannelKind, post_id: int):
        """Delete a synchronized post.

        Raises:
            PostNotFoundError: no post with that id in the index
        """
        self._channel(kind)
        async with self._locks[kind]:
            try:
                post = self._indexes[kind].pop(post_id)
            except KeyError:
                raise PostNotFoundError(kind, post_id) from None
            await self._discord.delete(post.message)
            logger.info(f"Deleted {kind} post {post_id}")

    async def push(self, kind: ChannelKind, post_id: int) -> bool:
        """Upsert a single post straight from page 1 of the feed.

        Returns:
            False if the post isn't on page 1 or is a draft.
        """
        items = await self._feed.fetch_items(kind, 1)
        item = next((i for i in items if i.id == post_id), None)
        if item is None or item.is_draft:
            logger.warning(f"{kind} post {post_id} is not published on page 1, not pushing")
            return False
        await self.set_post(kind, post_id, item.to_embed(), raw=True)
        return True
