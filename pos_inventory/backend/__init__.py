"""
Backing store implementations for the remote document store.
"""

from .base import BackingStore, DocumentDict
from .http import HttpBackingStore
from .memory import InMemoryBackingStore

__all__ = [
    "BackingStore",
    "DocumentDict",
    "HttpBackingStore",
    "InMemoryBackingStore",
]
