from __future__ import annotations

import logging
from pathlib import Path
from urllib.error import URLError
from urllib.parse import quote

from ..models.config_models import DEFAULT_EXPORT_URL, ImportConfig
from ..models.sheet_source import SheetSource
from .reader import SheetTable, TableReadError, read_csv_url, read_table_file

"""Source fetching.

A SheetSource is read from its Google Sheets CSV export, unless the config
names a local .csv/.xlsx override for it. Every failure surfaces as a
FetchFailure so the session can skip the source and keep going.
"""

__all__ = [
    "FetchFailure",
    "SheetFetcher",
    "build_export_url",
]

logger = logging.getLogger(__name__)


class FetchFailure(Exception):
    """A source could not be downloaded, read or tokenized."""

    def __init__(self, source: SheetSource, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"{source.label}: {message}")


def build_export_url(source: SheetSource, template: str = DEFAULT_EXPORT_URL) -> str:
    """Export URL for ``source``; ``&gid=<gid>`` is appended when a gid is set."""
    url = template.format(spreadsheet_id=quote(source.spreadsheet_id, safe=""))
    if source.gid:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}gid={quote(source.gid, safe='')}"
    return url


class SheetFetcher:
    """Turns a SheetSource into a SheetTable."""

    def __init__(self, config: ImportConfig | None = None) -> None:
        self.config = config if config is not None else ImportConfig()

    def fetch(self, source: SheetSource) -> SheetTable:
        override = self.config.override_for(source)
        try:
            if override is not None:
                path = Path(override.path)
                logger.info("Reading %s from local file %s", source.label, path)
                rows = read_table_file(path, override.sheet)
            else:
                url = build_export_url(source, self.config.export_url_template)
                logger.info("Downloading %s", url)
                rows = read_csv_url(url)
        except (TableReadError, URLError, OSError, UnicodeDecodeError) as e:
            raise FetchFailure(source, str(e)) from e
        table = SheetTable.from_rows(rows, source=source.label)
        logger.debug("fetched %s columns=%s rows=%d", source.label, table.columns, len(table))
        return table
