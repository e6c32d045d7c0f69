from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from .introspect import field_specs, is_descendable, unwrap_optional
from .metadata import CONVERTER, FunctionRef, method_bindings
from .registry import SheetRegistry, default_registry

"""Converter / assigner resolution.

Search order for ``resolve(root_type, selector)``:
1. functions marked on any class of ``root_type.__mro__`` (own class first,
   definition order), plus functions registered for those classes
2. recursively, the declared type of every descendable field of
   ``root_type`` (element type for collections), in declared field order

First match wins. The search is type-driven, so it is flattened once per
(root type, kind) into a ResolutionTable and cached on the resolver.
"""

__all__ = [
    "ResolutionTable",
    "MethodResolver",
]

logger = logging.getLogger(__name__)


@dataclass
class ResolutionTable:
    """Flattened first-match lookup for one root type and one function kind."""
    by_column: dict[str, Callable[..., Any]] = field(default_factory=dict)
    by_type: dict[Any, Callable[..., Any]] = field(default_factory=dict)
    scanned_types: list[type] = field(default_factory=list)


class MethodResolver:
    """Resolves converter/assigner functions for a root record type.

    Tables are built lazily and kept for the lifetime of the resolver; an
    import session owns one resolver, so nothing is shared between runs
    unless the host passes the same resolver in.
    """

    def __init__(self, registry: SheetRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry
        self._tables: dict[tuple[type, str], ResolutionTable] = {}

    def table(self, root_type: type, kind: str = CONVERTER) -> ResolutionTable:
        key = (root_type, kind)
        table = self._tables.get(key)
        if table is None:
            table = ResolutionTable()
            self._collect(root_type, kind, table, set())
            self._tables[key] = table
            logger.debug(
                "resolution table built type=%s kind=%s columns=%s types=%d scanned=%d",
                root_type.__name__,
                kind,
                sorted(table.by_column),
                len(table.by_type),
                len(table.scanned_types),
            )
        return table

    def resolve(self, root_type: type, selector: str | Any, kind: str = CONVERTER) -> Callable[..., Any] | None:
        """Find the function for a column name (str) or a value type."""
        table = self.table(root_type, kind)
        if isinstance(selector, str):
            return table.by_column.get(selector)
        for key in _type_keys(selector):
            func = table.by_type.get(key)
            if func is not None:
                return func
        return None

    def resolve_explicit(self, ref: FunctionRef | None, owners: Iterable[type]) -> Callable[..., Any] | None:
        """Resolve an explicit reference: a callable as is, a name on the first owner that has it."""
        if ref is None:
            return None
        if callable(ref):
            return ref
        for owner in owners:
            func = getattr(owner, ref, None)
            if callable(func):
                return func
        return None

    def _collect(self, tp: type, kind: str, table: ResolutionTable, seen: set[type]) -> None:
        if tp in seen:
            return
        seen.add(tp)
        table.scanned_types.append(tp)

        for klass in tp.__mro__:
            if klass is object:
                continue
            for name, attr in vars(klass).items():
                for binding in method_bindings(attr):
                    if binding.kind == kind:
                        _add(table, binding, _bind_descriptor(attr, tp, name))
            for binding, func in self.registry.functions_for(klass):
                if binding.kind == kind:
                    _add(table, binding, func)

        for spec in field_specs(tp):
            if spec.is_collection:
                child = spec.element_type
            else:
                child = spec.value_type
            if child is not None and is_descendable(child, self.registry):
                self._collect(child, kind, table, seen)


def _add(table: ResolutionTable, binding: Any, func: Callable[..., Any]) -> None:
    if binding.column is not None:
        table.by_column.setdefault(binding.column, func)
    elif _hashable(binding.value_type):
        table.by_type.setdefault(binding.value_type, func)


def _bind_descriptor(attr: Any, owner: type, name: str) -> Callable[..., Any]:
    # staticmethod -> plain function, classmethod -> bound to owner
    if hasattr(attr, "__get__"):
        return attr.__get__(None, owner)
    return getattr(owner, name)


def _type_keys(tp: Any) -> list[Any]:
    """Lookup keys for a type selector: the annotation itself, then Optional-unwrapped."""
    keys = [tp]
    inner, optional = unwrap_optional(tp)
    if optional:
        keys.append(inner)
    return [k for k in keys if _hashable(k)]


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True
