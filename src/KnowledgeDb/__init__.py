"""Reference data stores backing lookup fields."""
from .reference_store import InMemoryReferenceStore, ReferenceStore

__all__ = ["InMemoryReferenceStore", "ReferenceStore"]
