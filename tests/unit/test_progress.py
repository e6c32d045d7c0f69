from __future__ import annotations

from unittest.mock import patch

from sheet_binder.models.sheet_source import SheetSource
from sheet_binder.services.progress import ProgressTracker, is_tty_enabled

from sample_records import Monster


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True

    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("sheet_binder.services.progress.is_tty_enabled", return_value=True), \
             patch("sheet_binder.services.progress.tqdm") as mock_tqdm:

            tracker = ProgressTracker(4, description="Importing")

            assert tracker.total_sources == 4
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=4,
                desc="Importing",
                unit="sheet",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("sheet_binder.services.progress.is_tty_enabled", return_value=False), \
             patch("sheet_binder.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(4)
            assert tracker.enabled is False
            assert tracker.pbar is None
            mock_tqdm.assert_not_called()
            # all calls are no-ops without a bar
            tracker.start_source(Monster, SheetSource("abc"))
            tracker.set_postfix(ok=1)
            tracker.finish_source()
            tracker.close()
            assert tracker.current_source == 1

    def test_source_lifecycle_updates_bar(self):
        with patch("sheet_binder.services.progress.is_tty_enabled", return_value=True), \
             patch("sheet_binder.services.progress.tqdm") as mock_tqdm:
            pbar = mock_tqdm.return_value
            with ProgressTracker(2, description="Importing") as tracker:
                tracker.start_source(Monster, SheetSource("abc"))
                pbar.set_description.assert_called_with("Importing (Monster)")
                tracker.set_postfix(ok=1, failed=0)
                pbar.set_postfix.assert_called_with(ok=1, failed=0)
                tracker.finish_source(success=True)
                pbar.update.assert_called_once_with(1)
                pbar.set_description.assert_called_with("Importing")
            pbar.close.assert_called_once()
            assert tracker.pbar is None
