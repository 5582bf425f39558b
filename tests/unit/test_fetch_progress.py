from __future__ import annotations

from unittest.mock import MagicMock, patch

from perfdash.services.progress import FetchProgress


def test_progress_disabled_without_tty():
    with patch("perfdash.services.progress.is_tty_enabled", return_value=False):
        progress = FetchProgress(3)
    assert progress.enabled is False
    assert progress.pbar is None
    progress.sheet_done("A")
    progress.sheet_done("B", success=False)
    assert (progress.completed, progress.failed) == (2, 1)
    progress.close()


def test_progress_disabled_for_empty_cycle():
    with patch("perfdash.services.progress.is_tty_enabled", return_value=True):
        assert FetchProgress(0).pbar is None


def test_progress_updates_bar_on_tty():
    bar = MagicMock()
    with (
        patch("perfdash.services.progress.is_tty_enabled", return_value=True),
        patch("perfdash.services.progress.tqdm", return_value=bar) as tqdm_cls,
    ):
        with FetchProgress(2, description="Loading") as progress:
            progress.sheet_done("Production1")
            progress.sheet_done("QC Review", success=False)

    assert tqdm_cls.call_args.kwargs["total"] == 2
    assert tqdm_cls.call_args.kwargs["desc"] == "Loading"
    assert bar.update.call_count == 2
    bar.set_postfix.assert_called_with(sheet="QC Review", failed=1)
    bar.close.assert_called_once()
    assert progress.pbar is None
