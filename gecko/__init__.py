"""GECkO — mirrors GECo website news and events into Discord channels."""

__version__ = "0.4.0"
