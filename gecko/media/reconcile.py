"""Reconciliation — merge the remote feed against the local index.

Both sides are walked in ascending id order. For every published
remote item the merge decides one action:

  Create  — no local post left to compare against, post it
  Update  — local post found but its embed is out of date
  NoOp    — local post found and up to date
  Warn    — a local post with a higher id exists, so this item was
            missed earlier; it is reported, not created

Local posts that never match are left alone. Unidentifiable posts
are removed while building the index, never here.

The planning is pure: nothing is sent to Discord from this module.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from .equivalence import embeds_equivalent
from .index import LocalIndex
from .models import Embed, LocalPost, RemoteItem
from .transcoder import transcode as default_transcode

logger = logging.getLogger("gecko.media.reconcile")


@dataclass
class Create:
    item: RemoteItem
    embed: Embed


@dataclass
class Update:
    post: LocalPost
    embed: Embed


@dataclass
class NoOp:
    post_id: int


@dataclass
class Warn:
    post_id: int


Action = Union[Create, Update, NoOp, Warn]


class LocalCursor:
    """Forward cursor over the local posts that can hold one entry back.

    When a remote item is older than the current local post, that post
    may still match a later remote item. hold() puts it back so the
    next take() returns it again instead of advancing.
    """

    def __init__(self, posts: list[LocalPost]):
        self._posts = posts
        self._pos = 0
        self._held: Optional[LocalPost] = None

    @property
    def unconsumed(self) -> bool:
        return self._held is not None

    @property
    def exhausted(self) -> bool:
        return self._held is None and self._pos >= len(self._posts)

    def take(self) -> LocalPost:
        if self._held is not None:
            post, self._held = self._held, None
            return post
        post = self._posts[self._pos]
        self._pos += 1
        return post

    def hold(self, post: LocalPost):
        self._held = post


def ascending_feed(items: Iterable[RemoteItem]) -> list[RemoteItem]:
    """Turn a newest-first feed page into ascending order without drafts."""
    return [item for item in reversed(list(items)) if not item.is_draft]


def reconcile(
    items: Iterable[RemoteItem],
    index: LocalIndex,
    transcode: Callable[[Embed], Embed] = default_transcode,
) -> list[Action]:
    """Plan the actions that bring the local posts in line with the feed.

    Args:
        items: Remote items in ascending id order. Drafts are skipped.
        index: Local index of the same channel kind
        transcode: Embed converter applied to every remote item that is
            created or compared

    Returns:
        One action per published remote item, in feed order.
    """
    actions: list[Action] = []
    cursor = LocalCursor(index.posts())

    for item in items:
        if item.is_draft:
            continue
        logger.debug(f"Searching local post: {item.id}")

        while True:
            if cursor.exhausted:
                logger.debug(f"Posting new post: {item.id}")
                actions.append(Create(item=item, embed=transcode(item.to_embed())))
                break

            local = cursor.take()

            if item.id > local.post_id:
                logger.debug(f"Found old post: {local.post_id}")
                continue

            if item.id == local.post_id:
                logger.debug(f"Checking local post: {local.post_id}")
                fresh = transcode(item.to_embed())
                if embeds_equivalent(local.embed, fresh):
                    logger.debug(f"Post {local.post_id} is up-to-date.")
                    actions.append(NoOp(post_id=item.id))
                else:
                    logger.debug(f"Updating local post: {local.post_id}")
                    actions.append(Update(post=local, embed=fresh))
                break

            logger.warning(f"Post {item.id} is missing locally, ignoring.")
            actions.append(Warn(post_id=item.id))
            cursor.hold(local)
            break

    return actions
