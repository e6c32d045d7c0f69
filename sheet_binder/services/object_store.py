from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

"""Object store seam.

The binder never creates objects: each row is applied to an existing object
found by its key. Hosts plug their own persistence in through the
ObjectStore protocol; ``InMemoryObjectStore`` is the built-in implementation.
"""

__all__ = [
    "ObjectStore",
    "ObjectStoreError",
    "InMemoryObjectStore",
    "load_object_store",
]

logger = logging.getLogger(__name__)


class ObjectStoreError(Exception):
    """Raised when a store cannot be built from its config reference."""


@runtime_checkable
class ObjectStore(Protocol):
    def find_by_name(self, record_type: type, name: str) -> Any | None:
        """Existing object of ``record_type`` keyed by ``name``, or None."""
        ...

    def mark_dirty(self, obj: Any) -> None:
        """Flag an object as modified so ``save`` persists it."""
        ...

    def save(self) -> None:
        ...


class InMemoryObjectStore:
    """Objects held in a list, looked up by an attribute (``name`` by default).

    Lookup is by ``isinstance`` so subclasses of a record type are found too.
    """

    def __init__(self, objects: Iterable[Any] = (), *, name_attr: str = "name") -> None:
        self.name_attr = name_attr
        self._objects: list[Any] = list(objects)
        self._dirty: list[Any] = []
        self.save_count = 0

    def add(self, obj: Any) -> Any:
        self._objects.append(obj)
        return obj

    def __len__(self) -> int:
        return len(self._objects)

    def find_by_name(self, record_type: type, name: str) -> Any | None:
        for obj in self._objects:
            if isinstance(obj, record_type) and getattr(obj, self.name_attr, None) == name:
                return obj
        return None

    def mark_dirty(self, obj: Any) -> None:
        if not any(o is obj for o in self._dirty):
            self._dirty.append(obj)

    @property
    def dirty(self) -> list[Any]:
        return list(self._dirty)

    def save(self) -> None:
        logger.debug("in-memory store saved dirty=%d", len(self._dirty))
        self._dirty.clear()
        self.save_count += 1


def load_object_store(reference: str | None) -> ObjectStore:
    """Build a store from ``"package.module:factory"``; None gives an empty in-memory store.

    ``factory`` may be a zero-argument callable or an already built store.
    """
    if not reference:
        return InMemoryObjectStore()
    module_name, _, attr = reference.partition(":")
    if not module_name or not attr:
        raise ObjectStoreError(f"object_store must look like 'module:factory', got '{reference}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ObjectStoreError(f"cannot import object store module '{module_name}': {e}") from e
    try:
        target = getattr(module, attr)
    except AttributeError as e:
        raise ObjectStoreError(f"'{module_name}' has no attribute '{attr}'") from e

    # classes satisfy the protocol check structurally, so they are always called
    if isinstance(target, type) or (callable(target) and not isinstance(target, ObjectStore)):
        store = target()
    else:
        store = target
    if isinstance(store, type) or not isinstance(store, ObjectStore):
        raise ObjectStoreError(f"'{reference}' did not produce an object store")
    return store
