"""Segmented commit-log storage, topics and a broker, with a binary TCP echo server."""

__version__ = "0.1.0"