"""Local index — which Discord message mirrors which website post.

Rebuilt from the channel history at the start of every pass. Messages
that can't be tied to a post are deleted while building it, so after
construction the channel only holds identifiable posts.
"""

import logging
import re
from typing import Awaitable, Callable, Iterable, Iterator, Optional
from urllib.parse import urlsplit

from .models import LocalPost, Message
from .transcoder import BASE_URL

logger = logging.getLogger("gecko.media.index")


def post_url_pattern(site_url: str = BASE_URL) -> re.Pattern[str]:
    """Build the pattern matching news and event post URLs on a site.

    The "www." prefix is optional on either side.
    """
    host = urlsplit(site_url.strip()).hostname or ""
    if host.startswith("www."):
        host = host[len("www."):]
    return re.compile(rf'^\s*https?://(?:www\.)?{re.escape(host)}/(?:news|events)/(\d+)/?\s*$')


POST_URL_RE = post_url_pattern()


def get_post_id(message: Message, pattern: re.Pattern[str] = POST_URL_RE) -> Optional[int]:
    """Return the website post id a message mirrors, or None.

    A valid news or event message has exactly one embed whose URL
    points at the post on the website.
    """
    if len(message.embeds) != 1:
        return None

    url = message.embeds[0].url
    if not url:
        return None

    match = pattern.match(url)
    if match:
        return int(match.group(1))
    return None


class LocalIndex:
    """Ordered post id → LocalPost mapping. Iterates in ascending id order."""

    def __init__(self, posts: Iterable[LocalPost] = ()):
        self._posts: dict[int, LocalPost] = {}
        for post in posts:
            self.put(post)

    def put(self, post: LocalPost):
        self._posts[post.post_id] = post

    def get(self, post_id: int) -> Optional[LocalPost]:
        return self._posts.get(post_id)

    def pop(self, post_id: int) -> LocalPost:
        """Remove and return an entry. Raises KeyError if absent."""
        return self._posts.pop(post_id)

    def clear(self):
        self._posts.clear()

    def ids(self) -> list[int]:
        return sorted(self._posts)

    def posts(self) -> list[LocalPost]:
        return [self._posts[post_id] for post_id in self.ids()]

    def __contains__(self, post_id: int) -> bool:
        return post_id in self._posts

    def __iter__(self) -> Iterator[LocalPost]:
        return iter(self.posts())

    def __len__(self) -> int:
        return len(self._posts)

    def __repr__(self) -> str:
        return f"LocalIndex({self.ids()})"


async def build_index(
    messages: Iterable[Message],
    delete: Callable[[Message], Awaitable[None]],
    pattern: re.Pattern[str] = POST_URL_RE,
) -> LocalIndex:
    """Build the index from a channel history, deleting unidentifiable messages.

    Args:
        messages: Channel history, in the order Discord returned it
        delete: Async callable that removes a message from the channel
        pattern: Post URL pattern of the site, see post_url_pattern()

    Returns:
        The index. Duplicate ids: the last message seen wins.
    """
    index = LocalIndex()
    for message in messages:
        post_id = get_post_id(message, pattern)
        if post_id is None:
            logger.warning(f"Deleting message {message.id}: not a news or event post")
            await delete(message)
            continue
        index.put(LocalPost(post_id=post_id, message=message))
    return index
