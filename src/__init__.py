"""Magazeen: assemble a personal EPUB magazine from saved content."""

__version__ = "0.3.0"
