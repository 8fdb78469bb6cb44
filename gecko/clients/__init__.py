"""HTTP clients for the two sides of the synchronizer."""

from .discord import DiscordClient
from .geco import GecoClient

__all__ = ["DiscordClient", "GecoClient"]
