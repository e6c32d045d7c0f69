from __future__ import annotations

import collections.abc
import dataclasses
import enum
import functools
import inspect
import logging
import sys
import types
import typing
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import PurePath
from typing import Annotated, Any, ClassVar, Union

from .metadata import SHEET_FIELD_KEY, SheetField

"""Per-type static analysis.

``field_specs(cls)`` flattens a class into the ordered list of fields the
binder walks and the resolver searches. It runs once per class and is cached
for the process lifetime; descent eligibility additionally depends on the
registry's opaque handle types and is checked separately.
"""

__all__ = [
    "FieldSpec",
    "field_specs",
    "is_union",
    "unwrap_optional",
    "collection_element",
    "is_leaf_type",
    "is_descendable",
    "is_collection_value",
]

logger = logging.getLogger(__name__)

_LEAF_TYPES: tuple[type, ...] = (
    str, bytes, bytearray, bool, int, float, complex, Decimal,
    date, datetime, time, timedelta, uuid.UUID, PurePath,
)

_COLLECTION_ORIGINS: tuple[Any, ...] = (
    list, tuple, set, frozenset,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet, collections.abc.Collection,
    collections.abc.Iterable,
)

_NONE_TYPE = type(None)


@dataclass(frozen=True, eq=False)
class FieldSpec:
    """One field of a type, as the binder and resolver see it."""
    name: str
    owner: type
    annotation: Any  # declared type with Annotated[] stripped (Optional kept)
    binding: SheetField | None
    value_type: Any  # annotation with Optional[] unwrapped
    is_collection: bool
    element_type: Any | None  # None when the collection has no usable element type

    @property
    def is_bound(self) -> bool:
        return self.binding is not None


def is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is Union or origin is types.UnionType


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """``X | None`` -> (X, True); other unions and plain types are returned as is."""
    if is_union(tp):
        args = [a for a in typing.get_args(tp) if a is not _NONE_TYPE]
        has_none = len(args) != len(typing.get_args(tp))
        if len(args) == 1:
            return args[0], has_none
        if has_none:
            return Union[tuple(args)], True  # type: ignore[return-value]
    return tp, False


def collection_element(tp: Any) -> tuple[bool, Any | None]:
    """Return (is_collection, element_type) for an annotation.

    ``list`` / ``list[Any]`` / heterogeneous tuples are collections without
    a usable element type.
    """
    if tp in (list, tuple, set, frozenset):
        return True, None
    origin = typing.get_origin(tp)
    if origin is None or origin not in _COLLECTION_ORIGINS:
        return False, None
    args = typing.get_args(tp)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            args = args[:1]
        elif len(set(args)) != 1:
            return True, None
    if not args or args[0] is Any:
        return True, None
    element, _ = unwrap_optional(args[0])
    return True, element


def is_leaf_type(tp: Any) -> bool:
    """Primitive, string, enum, or otherwise scalar-like: never descended into."""
    if not isinstance(tp, type) or typing.get_origin(tp) is not None:
        return False
    return issubclass(tp, _LEAF_TYPES) or issubclass(tp, enum.Enum)


def is_descendable(tp: Any, registry: Any = None) -> bool:
    """Whether the walker/resolver may recurse into a value of declared type ``tp``.

    Excludes leaf types, collection and mapping classes themselves, ``object``,
    and the registry's opaque handle types (other record types included).
    """
    if not isinstance(tp, type) or tp is object or typing.get_origin(tp) is not None:
        return False
    if is_leaf_type(tp):
        return False
    if issubclass(tp, (collections.abc.Mapping, list, tuple, set, frozenset)):
        return False
    if registry is not None and registry.is_opaque(tp):
        return False
    return True


def is_collection_value(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray, collections.abc.Mapping)):
        return False
    return isinstance(value, (list, tuple, set, frozenset, collections.abc.Sequence))


def _split_annotated(tp: Any) -> tuple[Any, SheetField | None]:
    """Strip ``Annotated[]`` (also inside ``X | None``) and return its SheetField."""
    if typing.get_origin(tp) is Annotated:
        binding = next((m for m in tp.__metadata__ if isinstance(m, SheetField)), None)
        return tp.__origin__, binding
    if is_union(tp):
        binding = None
        args = []
        for arg in typing.get_args(tp):
            inner, found = _split_annotated(arg)
            if binding is None:
                binding = found
            args.append(inner)
        if binding is not None:
            return Union[tuple(args)], binding
    return tp, None


def _resolve_one(klass: type, name: str, annotation: Any) -> Any:
    module = sys.modules.get(klass.__module__)
    globalns = {**vars(klass), **(vars(module) if module is not None else {})}
    localns = {klass.__name__: klass}
    holder = type(f"{klass.__name__}.{name}", (), {"__annotations__": {name: annotation}})
    return typing.get_type_hints(holder, globalns, localns, include_extras=True)[name]


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError, AttributeError, SyntaxError):
        pass
    # One annotation does not resolve: resolve the others field by field
    hints: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        for name, annotation in inspect.get_annotations(klass).items():
            try:
                hints[name] = _resolve_one(klass, name, annotation)
            except (NameError, TypeError, AttributeError, SyntaxError) as e:
                logger.warning(
                    "%s.%s: cannot resolve annotation %r (%s); the field is treated as Any",
                    klass.__qualname__,
                    name,
                    annotation,
                    e,
                )
                hints[name] = Any
    return hints


def _build_spec(cls: type, name: str, annotation: Any, binding: SheetField | None) -> FieldSpec:
    annotation, annotated_binding = _split_annotated(annotation)
    if isinstance(annotation, str):
        annotation = Any
    value_type, _ = unwrap_optional(annotation)
    is_collection, element = collection_element(value_type)
    return FieldSpec(
        name=name,
        owner=cls,
        annotation=annotation,
        binding=binding or annotated_binding,
        value_type=value_type,
        is_collection=is_collection,
        element_type=element,
    )


@functools.cache
def field_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Ordered FieldSpecs of ``cls`` (declaration order, inherited fields first).

    Dataclasses contribute their ``fields()``; other classes contribute their
    annotated attributes (bindable through ``Annotated[T, SheetField(...)]``).
    """
    hints = _type_hints(cls)
    specs: list[FieldSpec] = []
    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            binding = f.metadata.get(SHEET_FIELD_KEY)
            specs.append(_build_spec(cls, f.name, hints.get(f.name, f.type), binding))
        return tuple(specs)

    for name, annotation in hints.items():
        if typing.get_origin(annotation) is ClassVar or annotation is ClassVar:
            continue
        if name.startswith("__"):
            continue
        specs.append(_build_spec(cls, name, annotation, None))
    return tuple(specs)
