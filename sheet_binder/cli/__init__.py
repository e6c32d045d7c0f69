"""Command-line entry point (``python -m sheet_binder.cli`` / ``sheet-binder``)."""
