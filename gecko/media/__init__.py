"""Media synchronization core — channel-agnostic news/event mirroring.

- Models: remote items, embeds, destination messages
- Transcoder: website markdown → Discord embed markdown
- Equivalence: stored embed vs. freshly transcoded embed
- Index: destination history → ordered id → post mapping
- Reconcile: sorted merge of remote feed against the local index
- Synchronizer: per-channel context that applies the merge
"""

from .models import ChannelKind, RemoteItem, Embed, EmbedAuthor, EmbedFooter, EmbedImage, Message, LocalPost
from .transcoder import transcode
from .equivalence import embeds_equivalent
from .index import LocalIndex, build_index, get_post_id, post_url_pattern
from .reconcile import Create, Update, NoOp, Warn, reconcile, ascending_feed
from .synchronizer import MediaSynchronizer, SyncReport

__all__ = [
    # Models
    "ChannelKind",
    "RemoteItem",
    "Embed",
    "EmbedAuthor",
    "EmbedFooter",
    "EmbedImage",
    "Message",
    "LocalPost",
    # Core
    "transcode",
    "embeds_equivalent",
    "LocalIndex",
    "build_index",
    "get_post_id",
    "post_url_pattern",
    "Create",
    "Update",
    "NoOp",
    "Warn",
    "reconcile",
    "ascending_feed",
    # Context
    "MediaSynchronizer",
    "SyncReport",
]
