from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..binding.registry import CallbackRegistration, SheetRegistry, default_registry
from ..models.sheet_source import SheetSource

"""Post-import notification.

After a run has applied every source, each distinct imported source is
offered to the registered callbacks once. A raising callback is logged and
reported; the remaining callbacks still fire.
"""

__all__ = [
    "PostImportNotifier",
]

logger = logging.getLogger(__name__)

FailureHandler = Callable[[CallbackRegistration, SheetSource, Exception], None]


class PostImportNotifier:
    def __init__(
        self,
        registry: SheetRegistry | None = None,
        on_failure: FailureHandler | None = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        self.on_failure = on_failure

    def notify(self, sources: Iterable[SheetSource]) -> int:
        """Fire matching callbacks for each distinct source, in batch order.

        Returns:
            Number of callbacks invoked (raising ones included)
        """
        seen: set[SheetSource] = set()
        invoked = 0
        registrations = self.registry.callbacks()
        for source in sources:
            if source in seen:
                continue
            seen.add(source)
            for registration in registrations:
                if not registration.matches(source):
                    continue
                invoked += 1
                logger.debug("callback %s for %s", registration.name, source.label)
                try:
                    registration.callback()
                except Exception as e:
                    logger.error(
                        "post-import callback %s failed for %s: %s",
                        registration.name,
                        source.label,
                        e,
                    )
                    if self.on_failure is not None:
                        self.on_failure(registration, source, e)
        return invoked
