from __future__ import annotations

import argparse
import importlib
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheet_binder.binding.registry import SheetRegistry, default_registry
from sheet_binder.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from sheet_binder.logging.init import log_summary, setup_logging
from sheet_binder.models.config_models import ImportConfig
from sheet_binder.services.object_store import ObjectStoreError, load_object_store
from sheet_binder.services.session import ImportSession
from sheet_binder.services.summary import render_summary_line
from sheet_binder.tabular.fetch import FetchFailure, SheetFetcher

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (``--config`` / SHEET_BINDER_CONFIG)
- Import the configured modules so their ``@sheet`` types register
- Build the object store, run one ImportSession, print the SUMMARY line

Exit codes: 0 all sources imported cleanly, 2 partial failure (failed
source, field failure, callback failure or save failure), 1 fatal startup
error.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "SHEET_BINDER_CONFIG"
INSPECT_SAMPLE_ROWS = 3


class StartupError(Exception):
    """Fatal problem before any source is processed."""


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values override the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sheet-binder",
        description="Bind spreadsheet rows onto existing typed records",
    )
    p.add_argument("--config", type=Path, default=None, help="Path to the YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print each source's header & first rows then exit",
    )
    p.add_argument(
        "--only",
        action="append",
        metavar="TYPE",
        default=None,
        help="Import only this record type (class name); repeatable",
    )
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _import_modules(modules: list[str]) -> None:
    # record modules live in the project being imported, not in site-packages
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    for name in modules:
        try:
            importlib.import_module(name)
        except ImportError as e:
            raise StartupError(f"cannot import module '{name}': {e}") from e


def _resolve_registry(reference: str | None) -> SheetRegistry:
    if not reference:
        return default_registry
    module_name, _, attr = reference.partition(":")
    try:
        registry = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise StartupError(f"cannot resolve registry '{reference}': {e}") from e
    if not isinstance(registry, SheetRegistry):
        raise StartupError(f"'{reference}' is not a SheetRegistry")
    return registry


def _inspect_data(cfg: ImportConfig, registry: SheetRegistry, only: list[str] | None) -> int:
    fetcher = SheetFetcher(cfg)
    selected = registry.select(only)
    if not selected:
        print("inspect: no registered record types")
        return EXIT_SUCCESS_ALL
    for record_type, info in selected:
        print(f"TYPE: {record_type.__name__} source={info.source.label}")
        try:
            table = fetcher.fetch(info.source)
        except FetchFailure as e:
            print(f"  fetch_error: {e.message}")
            continue
        print(f"  columns={table.columns} rows={len(table)}")
        for row in table.rows[:INSPECT_SAMPLE_ROWS]:
            print(f"    row {row.row_number}: {dict(row.cells)}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None means "read sys.argv"; an explicit [] must not pick up pytest's own args
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    config_path = _config_path(args)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        _import_modules(cfg.modules)
        registry = _resolve_registry(cfg.registry)
        if args.inspect_data:
            return _inspect_data(cfg, registry, args.only)
        store = load_object_store(cfg.object_store)
    except (StartupError, ObjectStoreError) as e:
        logger.error(f"startup: {e}")
        return EXIT_FATAL

    logger.info(f"Importing {len(registry.record_types())} registered record type(s)")
    session = ImportSession(store, registry=registry, config=cfg)
    result = session.run(only=args.only)

    logger.info(
        f"callbacks_fired={result.callbacks_fired} callback_failures={result.callback_failures}"
    )
    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.has_failures:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
