"""Tests for DirectoryWatcher and rule file event filtering."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from keyrules.authority.watcher import DirectoryWatcher, RuleFileEventHandler, is_rule_file_name


class TestIsRuleFileName:
    @pytest.mark.parametrize("name", ["10-a.keyrules", "local.keyrules"])
    def test_accepts(self, name: str) -> None:
        assert is_rule_file_name(name)

    @pytest.mark.parametrize(
        "name",
        [".10-a.keyrules", "#10-a.keyrules", "10-a.keyrules~", "10-a.keyrules.swp", "README"],
    )
    def test_rejects(self, name: str) -> None:
        assert not is_rule_file_name(name)

    def test_custom_suffix(self) -> None:
        assert is_rule_file_name("a.rules", ".rules")
        assert not is_rule_file_name("a.keyrules", ".rules")


class TestRuleFileEventHandler:
    def _handler(self) -> tuple[RuleFileEventHandler, MagicMock]:
        on_change = MagicMock()
        return RuleFileEventHandler(on_change), on_change

    @pytest.mark.parametrize(
        "event",
        [
            FileCreatedEvent("/rules/10-a.keyrules"),
            FileDeletedEvent("/rules/10-a.keyrules"),
            FileClosedEvent("/rules/10-a.keyrules"),
        ],
    )
    def test_reloads_on_relevant_event(self, event: object) -> None:
        handler, on_change = self._handler()
        handler.dispatch(event)  # type: ignore[arg-type]
        on_change.assert_called_once_with("/rules/10-a.keyrules")

    def test_ignores_plain_modification(self) -> None:
        handler, on_change = self._handler()
        handler.dispatch(FileModifiedEvent("/rules/10-a.keyrules"))
        on_change.assert_not_called()

    @pytest.mark.parametrize(
        "path",
        ["/rules/.10-a.keyrules.swp", "/rules/#10-a.keyrules#", "/rules/notes.txt", "/rules/.hidden.keyrules"],
    )
    def test_ignores_irrelevant_names(self, path: str) -> None:
        handler, on_change = self._handler()
        handler.dispatch(FileCreatedEvent(path))
        on_change.assert_not_called()

    def test_ignores_directories(self) -> None:
        handler, on_change = self._handler()
        handler.dispatch(DirCreatedEvent("/rules/sub.keyrules"))
        on_change.assert_not_called()

    def test_move_into_rule_name(self) -> None:
        # Editors often save by writing a temp file and renaming it over.
        handler, on_change = self._handler()
        handler.dispatch(FileMovedEvent("/rules/.10-a.keyrules.tmp", "/rules/10-a.keyrules"))
        on_change.assert_called_once_with("/rules/10-a.keyrules")

    def test_move_away_from_rule_name(self) -> None:
        handler, on_change = self._handler()
        handler.dispatch(FileMovedEvent("/rules/10-a.keyrules", "/rules/10-a.disabled"))
        on_change.assert_called_once_with("/rules/10-a.keyrules")

    def test_callback_error_is_contained(self) -> None:
        on_change = MagicMock(side_effect=RuntimeError("boom"))
        handler = RuleFileEventHandler(on_change)
        handler.dispatch(FileCreatedEvent("/rules/10-a.keyrules"))
        on_change.assert_called_once()


class TestDirectoryWatcher:
    def test_missing_directory_degrades_to_static(self, tmp_path: Path) -> None:
        observer = MagicMock()
        watcher = DirectoryWatcher(
            [tmp_path / "missing", tmp_path],
            MagicMock(),
            observer_factory=lambda: observer,
        )
        watcher.start()

        assert watcher.watched == [tmp_path]
        observer.schedule.assert_called_once()
        watcher.stop()
        observer.stop.assert_called_once()

    def test_schedule_error_degrades_to_static(self, tmp_path: Path) -> None:
        observer = MagicMock()
        observer.schedule.side_effect = PermissionError("denied")
        watcher = DirectoryWatcher([tmp_path], MagicMock(), observer_factory=lambda: observer)

        watcher.start()

        assert watcher.watched == []
        assert watcher.is_running
        watcher.stop()

    def test_start_twice_is_harmless(self, tmp_path: Path) -> None:
        factory = MagicMock()
        watcher = DirectoryWatcher([tmp_path], MagicMock(), observer_factory=factory)
        watcher.start()
        watcher.start()
        factory.assert_called_once()
        watcher.stop()

    def test_stop_without_start(self, tmp_path: Path) -> None:
        watcher = DirectoryWatcher([tmp_path], MagicMock())
        watcher.stop()
        assert not watcher.is_running

    def test_real_filesystem_event(self, tmp_path: Path) -> None:
        changed = threading.Event()
        seen: list[str] = []

        def on_change(path: str) -> None:
            seen.append(path)
            changed.set()

        with DirectoryWatcher([tmp_path], on_change) as watcher:
            assert watcher.watched == [tmp_path]
            (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
            (tmp_path / "10-a.keyrules").write_text("[Policy]\n", encoding="utf-8")
            assert changed.wait(timeout=10)

        assert all(p.endswith("10-a.keyrules") for p in seen)
