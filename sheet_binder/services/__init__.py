"""Run-level services: import session, notifier, object store, progress and summary."""

from .notifier import PostImportNotifier
from .object_store import InMemoryObjectStore, ObjectStore, ObjectStoreError, load_object_store
from .session import ImportSession
from .summary import render_summary_line

__all__ = [
    "ImportSession",
    "InMemoryObjectStore",
    "ObjectStore",
    "ObjectStoreError",
    "PostImportNotifier",
    "load_object_store",
    "render_summary_line",
]
