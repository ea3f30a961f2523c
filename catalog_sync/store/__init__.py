"""
The store module holds the templates written by a sync run and the catalog
status persisted between runs.

- Templates are keyed by `TemplateKey` (namespace and name).
- Lookups of a missing template raise `ObjectNotFoundError`, rejected writes
  raise `StoreError`.
- Listeners can observe template creation, update and deletion.

This abstract interface allows for various implementations (in-memory, local
files, a remote API).
"""

from .store import TemplateStore, TemplateKey, StoreEvent
from .in_memory import InMemoryTemplateStore
from .local import LocalTemplateStore
from .status import CatalogStatusWriter, InMemoryStatusWriter, LocalStatusWriter

__all__ = [
    "TemplateStore",
    "TemplateKey",
    "StoreEvent",
    "InMemoryTemplateStore",
    "LocalTemplateStore",
    "CatalogStatusWriter",
    "InMemoryStatusWriter",
    "LocalStatusWriter",
]
