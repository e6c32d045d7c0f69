from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..models.sheet_source import SheetSource
from .case import Case
from .metadata import ASSIGNER, CONVERTER, MethodBinding, SheetInfo

"""Explicit registration tables.

A SheetRegistry knows:
- which classes are bindable root record types (and their SheetInfo)
- which types are externally-owned handles that must never be descended into
- converter / assigner functions registered by call instead of by decorator
- post-import callbacks keyed by source identity

``default_registry`` is what the decorators use unless told otherwise.
"""

__all__ = [
    "CallbackRegistration",
    "SheetRegistry",
    "default_registry",
    "sheet",
    "sheet_imported",
]

logger = logging.getLogger(__name__)

_SHEET_INFO_ATTR = "__sheet_info__"


def _split_gids(gid: str | Iterable[str] | None) -> tuple[str, ...]:
    if gid is None:
        return ()
    parts = gid.split(",") if isinstance(gid, str) else list(gid)
    return tuple(p.strip() for p in parts if p and str(p).strip())


@dataclass(frozen=True)
class CallbackRegistration:
    """Zero-argument callback fired after its source has been imported.

    An empty ``gids`` filter matches every sub-sheet of the spreadsheet.
    """
    spreadsheet_id: str
    gids: tuple[str, ...]
    callback: Callable[[], Any]

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

    def matches(self, source: SheetSource) -> bool:
        if self.spreadsheet_id != source.spreadsheet_id:
            return False
        return not self.gids or source.gid in self.gids


class SheetRegistry:
    """Registration tables consulted by the resolver, binder and notifier."""

    def __init__(self) -> None:
        self._record_types: dict[type, SheetInfo] = {}
        self._opaque_types: list[type] = []
        self._functions: dict[type, list[tuple[MethodBinding, Callable[..., Any]]]] = {}
        self._callbacks: list[CallbackRegistration] = []

    # -- record types -------------------------------------------------

    def register_type(self, cls: type, info: SheetInfo) -> None:
        if cls in self._record_types and self._record_types[cls] != info:
            logger.warning("record type %s re-registered with different sheet info", cls.__name__)
        self._record_types[cls] = info

    def record_types(self) -> list[type]:
        """Registered root types in registration order."""
        return list(self._record_types)

    def select(self, only: Iterable[str] | None = None) -> list[tuple[type, SheetInfo]]:
        """Registered (type, SheetInfo) pairs in registration order.

        ``only`` keeps the types whose ``__name__`` or ``__qualname__`` is listed;
        names matching no registered type are logged and ignored.
        """
        pairs = list(self._record_types.items())
        if only is None:
            return pairs
        wanted = set(only)
        known = {t.__name__ for t, _ in pairs} | {t.__qualname__ for t, _ in pairs}
        for name in sorted(wanted - known):
            logger.warning("--only %s does not name a registered record type", name)
        return [(t, info) for t, info in pairs if t.__name__ in wanted or t.__qualname__ in wanted]

    def info_for(self, cls: type) -> SheetInfo | None:
        return self._record_types.get(cls)

    # -- opaque handle types -----------------------------------------

    def add_opaque_type(self, tp: type) -> None:
        """Treat ``tp`` (and subclasses) as an externally-owned handle: never descend."""
        if tp not in self._opaque_types:
            self._opaque_types.append(tp)

    def is_opaque(self, tp: Any) -> bool:
        """Root record types are separately-owned objects when referenced as fields."""
        if not isinstance(tp, type):
            return False
        handles = tuple(self._record_types) + tuple(self._opaque_types)
        return bool(handles) and issubclass(tp, handles)

    # -- explicit function registrations ------------------------------

    def _register_function(
        self, kind: str, owner: type, func: Callable[..., Any], column: str | None, value_type: Any
    ) -> None:
        binding = MethodBinding(kind=kind, column=column, value_type=value_type)
        self._functions.setdefault(owner, []).append((binding, func))

    def register_converter(
        self, owner: type, func: Callable[[str], Any], *, column: str | None = None, value_type: Any = None
    ) -> None:
        """Register ``func`` as if it were a ``@sheet_converter`` method declared on ``owner``."""
        self._register_function(CONVERTER, owner, func, column, value_type)

    def register_assigner(
        self,
        owner: type,
        func: Callable[[Any, Any], Any],
        *,
        column: str | None = None,
        value_type: Any = None,
    ) -> None:
        """Register ``func`` as if it were a ``@sheet_assigner`` method declared on ``owner``."""
        self._register_function(ASSIGNER, owner, func, column, value_type)

    def functions_for(self, owner: type) -> list[tuple[MethodBinding, Callable[..., Any]]]:
        return list(self._functions.get(owner, ()))

    # -- post-import callbacks ---------------------------------------

    def register_callback(
        self,
        spreadsheet_id: str,
        callback: Callable[[], Any],
        gid: str | Iterable[str] | None = None,
    ) -> CallbackRegistration:
        registration = CallbackRegistration(
            spreadsheet_id=spreadsheet_id, gids=_split_gids(gid), callback=callback
        )
        self._callbacks.append(registration)
        return registration

    def callbacks(self) -> list[CallbackRegistration]:
        return list(self._callbacks)


default_registry = SheetRegistry()


def sheet(
    spreadsheet_id: str,
    gid: str | None = None,
    *,
    casing: Case | str | None = None,
    registry: SheetRegistry | None = None,
) -> Callable[[type], type]:
    """Class decorator declaring a bindable root record type.

    Example:
        >>> @sheet("1AbC...", gid="0", casing=Case.TITLE)
        ... @dataclass
        ... class Monster:
        ...     name: str
        ...     max_health: int = sheet_field(default=0)   # column "Max Health"
    """
    info = SheetInfo(
        source=SheetSource(spreadsheet_id, gid),
        casing=None if casing is None else Case.parse(casing),
    )
    target_registry = registry if registry is not None else default_registry

    def decorator(cls: type) -> type:
        setattr(cls, _SHEET_INFO_ATTR, info)
        target_registry.register_type(cls, info)
        return cls

    return decorator


def sheet_imported(
    spreadsheet_id: str,
    gid: str | Iterable[str] | None = None,
    *,
    registry: SheetRegistry | None = None,
) -> Callable[[Any], Any]:
    """Register a zero-argument function to run after ``spreadsheet_id`` is imported.

    ``gid`` may be a comma-separated string ("0,123") or a list; omitted means
    any sub-sheet of the spreadsheet.
    """
    target_registry = registry if registry is not None else default_registry

    def decorator(func: Any) -> Any:
        target_registry.register_callback(spreadsheet_id, getattr(func, "__func__", func), gid)
        return func

    return decorator
