"""Builders for remote items, messages and local posts used across tests."""

from gecko.media.models import Embed, LocalPost, Message, RemoteItem
from gecko.media.transcoder import transcode


def news_url(post_id: int) -> str:
    return f"https://geco.ethz.ch/news/{post_id}"


def make_item(post_id: int, title: str = None, description: str = "Body", is_draft: bool = False) -> RemoteItem:
    return RemoteItem(
        id=post_id,
        title=title or f"News {post_id}",
        description=description,
        url=news_url(post_id),
        is_draft=is_draft,
    )


def make_message(message_id: str, *embeds: Embed, channel_id: str = "news-channel") -> Message:
    return Message(id=message_id, channel_id=channel_id, embeds=list(embeds))


def synced_post(item: RemoteItem, message_id: str = None) -> LocalPost:
    """A local post whose embed matches what the item transcodes to."""
    message = make_message(message_id or f"m{item.id}", transcode(item.to_embed()))
    return LocalPost(post_id=item.id, message=message)


def stale_post(post_id: int, message_id: str = None) -> LocalPost:
    """A local post whose embed no longer matches the website."""
    embed = Embed(title="Old title", description="Old body", url=news_url(post_id))
    return LocalPost(post_id=post_id, message=make_message(message_id or f"m{post_id}", embed))
