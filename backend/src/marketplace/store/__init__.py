"""
Document store backends and the per-container store handle.
"""
from typing import Optional

from .base import DocumentStore, Guard
from .dynamo import DynamoDocumentStore
from .memory import MemoryDocumentStore

_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
    """Build the DynamoDB store from config once per Lambda container."""
    global _store
    if _store is None:
        _store = DynamoDocumentStore.from_config()
    return _store


__all__ = ['DocumentStore', 'Guard', 'DynamoDocumentStore', 'MemoryDocumentStore', 'get_store']
