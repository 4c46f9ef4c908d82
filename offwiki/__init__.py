"""Offline reader for block-compressed MediaWiki dumps."""

__version__ = "0.1.0"
