"""Data model shared by the feed client, the transcoder and the Discord client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Discord "blurple", the color every synchronized post carries
EMBED_COLOR = 0x7289DA


class ChannelKind(str, Enum):
    NEWS = "news"
    EVENTS = "events"

    def __str__(self) -> str:
        return self.value


@dataclass
class EmbedAuthor:
    name: Optional[str] = None
    url: Optional[str] = None
    icon_url: Optional[str] = None


@dataclass
class EmbedFooter:
    text: Optional[str] = None


@dataclass
class EmbedImage:
    url: Optional[str] = None


@dataclass
class Embed:
    """A rich document attached to a Discord message.

    Used both for what we send (transcoder output) and for what Discord
    hands back in the channel history. Discord omits empty fields, so a
    stored embed may have description=None where we sent "".
    """
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    author: Optional[EmbedAuthor] = None
    footer: Optional[EmbedFooter] = None
    image: Optional[EmbedImage] = None
    color: Optional[int] = EMBED_COLOR

    def to_dict(self) -> dict:
        """Render as a Discord embed object, leaving out absent fields."""
        data: dict = {"type": "rich"}
        for key in ("title", "description", "url", "color"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.author is not None:
            data["author"] = _compact({
                "name": self.author.name,
                "url": self.author.url,
                "icon_url": self.author.icon_url,
            })
        if self.footer is not None:
            data["footer"] = _compact({"text": self.footer.text})
        if self.image is not None:
            data["image"] = _compact({"url": self.image.url})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Embed":
        """Parse a Discord embed object (as returned by the message history)."""
        author = data.get("author")
        footer = data.get("footer")
        image = data.get("image")
        return cls(
            title=data.get("title"),
            description=data.get("description"),
            url=data.get("url"),
            author=EmbedAuthor(
                name=author.get("name"),
                url=author.get("url"),
                icon_url=author.get("icon_url"),
            ) if author is not None else None,
            footer=EmbedFooter(text=footer.get("text")) if footer is not None else None,
            image=EmbedImage(url=image.get("url")) if image is not None else None,
            color=data.get("color"),
        )


def _compact(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class RemoteItem:
    """A news or event post as published on the website."""
    id: int
    title: str
    description: str
    url: str
    is_draft: bool = False
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    author_icon_url: Optional[str] = None
    footer: Optional[str] = None

    def to_embed(self) -> Embed:
        """Build the raw (not yet transcoded) embed for this item.

        Author and footer blocks are only attached when they carry text:
        Discord drops empty blocks, and a block we send but never get back
        would make every comparison fail.
        """
        author = None
        if self.author_name:
            author = EmbedAuthor(
                name=self.author_name,
                url=self.author_url,
                icon_url=self.author_icon_url,
            )
        footer = EmbedFooter(text=self.footer) if self.footer else None
        return Embed(
            title=self.title,
            description=self.description,
            url=self.url,
            author=author,
            footer=footer,
        )


@dataclass
class Message:
    """A message in a Discord channel."""
    id: str
    channel_id: str
    embeds: list[Embed] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            id=str(data["id"]),
            channel_id=str(data["channel_id"]),
            embeds=[Embed.from_dict(e) for e in data.get("embeds") or []],
        )


@dataclass
class LocalPost:
    """A Discord message identified as the mirror of one website post."""
    post_id: int
    message: Message

    @property
    def embed(self) -> Embed:
        return self.message.embeds[0]
