from __future__ import annotations

from dataclasses import dataclass, field

from ..binding.case import Case
from .sheet_source import SheetSource

"""Config dataclasses for the sheet import tool.

These are the typed domain models produced by ``config.loader.load_config``.
Every field has a default so a session can run without a config file.
"""

__all__ = [
    "DEFAULT_EXPORT_URL",
    "SourceOverride",
    "ImportConfig",
]

DEFAULT_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=csv"


@dataclass(frozen=True)
class SourceOverride:
    """Local file standing in for a remote spreadsheet export.

    ``gid=None`` matches every sub-sheet of the spreadsheet. ``sheet`` selects
    a worksheet when ``path`` is an .xlsx workbook.
    """
    spreadsheet_id: str
    path: str
    gid: str | None = None
    sheet: str | None = None

    def matches(self, source: SheetSource) -> bool:
        if self.spreadsheet_id != source.spreadsheet_id:
            return False
        return self.gid is None or self.gid == source.gid


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    modules: list[str] = field(default_factory=list)  # imported so their @sheet types register
    registry: str | None = None  # "module:attribute", None = package default registry
    object_store: str | None = None  # "module:factory" returning an ObjectStore
    key_column: str = "Name"
    default_casing: Case = Case.NONE  # used when @sheet(casing=...) is not given
    export_url_template: str = DEFAULT_EXPORT_URL
    sources: list[SourceOverride] = field(default_factory=list)
    error_log_dir: str = "./logs"

    def override_for(self, source: SheetSource) -> SourceOverride | None:
        """First local override matching ``source`` (config order)."""
        for override in self.sources:
            if override.matches(source):
                return override
        return None
