from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .assigner import ValueAssigner
from .case import Case, normalize
from .converter import ValueConverter
from .errors import BindError
from .introspect import FieldSpec, field_specs, is_collection_value, is_descendable
from .metadata import SheetField
from .registry import SheetRegistry, default_registry
from .resolver import MethodResolver

"""Recursive row binder.

Walks a root object's field tree depth-first in declared field order:

- a field carrying binding metadata is a leaf: its column is looked up in the
  row (falling back to the repeated-column form ``"<column> <index>"``), the
  raw text is converted, then assigned
- any other field whose declared type is descendable is walked into; a
  collection value is walked element by element using each element's own type

Every ``bind_row`` call gets a fresh BindPass holding the visited-identity set
(cycle / diamond guard) and the per-column repeated-index counters, so no
state leaks between rows.
"""

__all__ = [
    "BindPass",
    "BindOutcome",
    "RowBinder",
]

logger = logging.getLogger(__name__)


@dataclass
class BindPass:
    """Mutable state of one row-binding pass."""
    row: Mapping[str, str]
    root_type: type
    casing: Case
    visited: set[int] = field(default_factory=set)
    indices: dict[str, int] = field(default_factory=dict)
    failures: list[BindError] = field(default_factory=list)
    assigned: int = 0
    skipped: int = 0

    def report(self, failure: BindError) -> None:
        self.failures.append(failure)

    def lookup(self, column: str) -> str | None:
        """Cell for ``column``, or the next unconsumed ``"<column> <index>"`` cell."""
        raw = self.row.get(column)
        if raw is not None:
            return raw
        index = self.indices.get(column, 0)
        raw = self.row.get(f"{column} {index}")
        if raw is not None:
            self.indices[column] = index + 1
        return raw


@dataclass(frozen=True)
class BindOutcome:
    """What one ``bind_row`` call did."""
    assigned: int
    skipped: int  # bound fields with no matching column in the row
    visited: int  # distinct objects walked
    failures: tuple[BindError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


class RowBinder:
    """Binds rows onto existing objects of registered record types."""

    def __init__(
        self,
        registry: SheetRegistry | None = None,
        resolver: MethodResolver | None = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        self.resolver = resolver if resolver is not None else MethodResolver(self.registry)
        self.converter = ValueConverter(self.resolver)
        self.assigner = ValueAssigner(self.resolver)
        self._columns: dict[tuple[type, str, Case], str] = {}

    def column_for(self, spec: FieldSpec, casing: Case) -> str:
        """Column feeding ``spec``: explicit name, else the normalized field name."""
        key = (spec.owner, spec.name, casing)
        column = self._columns.get(key)
        if column is None:
            explicit = spec.binding.column if spec.binding is not None else None
            column = explicit or normalize(spec.name, casing)
            self._columns[key] = column
        return column

    def bind_row(
        self,
        root_object: Any,
        row: Mapping[str, str],
        root_type: type | None = None,
        casing: Case | str | None = None,
    ) -> BindOutcome:
        """Bind one row onto ``root_object``.

        ``root_type`` defaults to the object's class; ``casing`` defaults to the
        casing declared by ``@sheet`` on the root type, else ``Case.NONE``.
        """
        if root_type is None:
            root_type = type(root_object)
        if casing is None:
            info = self.registry.info_for(root_type)
            casing = info.casing if info is not None and info.casing is not None else Case.NONE
        bind_pass = BindPass(row=row, root_type=root_type, casing=Case.parse(casing))
        self._walk(root_object, root_type, bind_pass)
        return BindOutcome(
            assigned=bind_pass.assigned,
            skipped=bind_pass.skipped,
            visited=len(bind_pass.visited),
            failures=tuple(bind_pass.failures),
        )

    def _walk(self, obj: Any, tp: type, bind_pass: BindPass) -> None:
        identity = id(obj)
        if identity in bind_pass.visited:
            return
        bind_pass.visited.add(identity)

        for spec in field_specs(tp):
            if spec.binding is not None:
                self._bind_field(obj, spec, spec.binding, bind_pass)
            else:
                self._descend(obj, spec, bind_pass)

    def _bind_field(self, obj: Any, spec: FieldSpec, binding: SheetField, bind_pass: BindPass) -> None:
        column = self.column_for(spec, bind_pass.casing)
        raw = bind_pass.lookup(column)
        if raw is None:
            bind_pass.skipped += 1
            return

        value = self.converter.convert(
            column,
            raw,
            spec.annotation,
            binding.converter,
            bind_pass.root_type,
            report=bind_pass.report,
            owners=(spec.owner,),
        )
        written = self.assigner.assign(
            column,
            raw,
            spec.annotation,
            binding.assigner,
            bind_pass.root_type,
            spec,
            obj,
            value,
            report=bind_pass.report,
        )
        if written:
            bind_pass.assigned += 1
            logger.debug("bound %s.%s <- column '%s'", type(obj).__name__, spec.name, column)

    def _descend(self, obj: Any, spec: FieldSpec, bind_pass: BindPass) -> None:
        value = getattr(obj, spec.name, None)
        if value is None:
            return

        if spec.is_collection or (spec.value_type is Any and is_collection_value(value)):
            # collections without a usable element type are skipped silently
            if not is_descendable(spec.element_type, self.registry):
                return
            if not is_collection_value(value):
                return
            for element in value:
                if element is not None and is_descendable(type(element), self.registry):
                    self._walk(element, type(element), bind_pass)
            return

        declared = spec.value_type
        if is_descendable(declared, self.registry):
            self._walk(value, declared, bind_pass)
        elif not isinstance(declared, type) and is_descendable(type(value), self.registry):
            # Any / multi-member unions: fall back to the runtime type
            self._walk(value, type(value), bind_pass)
