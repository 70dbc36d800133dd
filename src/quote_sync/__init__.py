"""Notion -> Quote/0 page sync service."""

__version__ = "0.1.0"
