"""Media sync exception hierarchy.

Classify failures by type, not by string matching. The scheduler and
the CLI catch these; alerts.classify_error turns them into short text.
"""

from typing import Optional


class MediaSyncError(Exception):
    """Base class for all media synchronization errors."""
    pass


class FeedUnavailableError(MediaSyncError):
    """Remote feed could not be fetched or returned no usable data."""
    pass


class DestinationError(MediaSyncError):
    """A send/edit/delete/history call against Discord failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PostNotFoundError(MediaSyncError):
    """Manual delete requested for an id that has no synchronized post."""

    def __init__(self, kind, post_id: int):
        super().__init__(f"No {kind} post with id {post_id}")
        self.kind = kind
        self.post_id = post_id
