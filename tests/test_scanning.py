"""Tests for directory scanning and exclude/include filtering."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from trackwatch.errors import ScanError
from trackwatch.logging import get_target_logger
from trackwatch.scanning import (
    apply_excludes,
    apply_includes,
    filter_names,
    list_files,
    scan_directory,
)


def _compile(*patterns: str) -> list[re.Pattern[str]]:
    return [re.compile(p) for p in patterns]


class TestFilterPasses:
    """Test the two pure filter passes."""

    def test_no_patterns_includes_everything(self) -> None:
        names = ["a.py", "b.log", "c"]
        assert filter_names(names) == names

    def test_exclude_pass_marks_matches(self) -> None:
        states = apply_excludes(["a.py", "b.log"], _compile(r"\.log$"))
        assert states == {"a.py": True, "b.log": False}

    def test_include_pass_readmits(self) -> None:
        states = apply_includes({"debug.log": False, "other.log": False}, _compile(r"debug\.log$"))
        assert states == {"debug.log": True, "other.log": False}

    def test_include_overrides_exclude(self) -> None:
        """An include re-admits a name an exclude removed."""
        result = filter_names(
            ["debug.log", "other.log", "main.py"],
            exclude=_compile(r".*\.log$"),
            include=_compile(r"debug\.log$"),
        )
        assert result == ["debug.log", "main.py"]

    def test_include_alone_does_not_exclude_others(self) -> None:
        """Include patterns only re-admit; they never narrow the set."""
        result = filter_names(["a.py", "b.txt"], include=_compile(r"\.py$"))
        assert result == ["a.py", "b.txt"]

    def test_any_exclude_pattern_excludes(self) -> None:
        result = filter_names(
            ["a.py", "b.tmp", "c.swp"], exclude=_compile(r"\.tmp$", r"\.swp$")
        )
        assert result == ["a.py"]

    def test_patterns_match_anywhere(self) -> None:
        """Patterns are searched, not anchored at the start."""
        result = filter_names(["notes_backup.txt", "notes.txt"], exclude=_compile("backup"))
        assert result == ["notes.txt"]

    def test_order_preserved(self) -> None:
        names = ["z", "a", "m"]
        assert filter_names(names, exclude=_compile("^q$")) == ["z", "a", "m"]


class TestListFiles:
    """Test the one-level directory listing."""

    def test_lists_regular_files_only(self, root: Path) -> None:
        (root / "main.py").write_text("x")
        (root / "sub").mkdir()
        (root / "sub" / "nested.py").write_text("y")

        assert list_files(str(root)) == ["main.py"]

    def test_empty_directory(self, root: Path) -> None:
        assert list_files(str(root)) == []

    def test_missing_directory_is_fatal(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope"
        with pytest.raises(ScanError) as exc_info:
            list_files(str(missing))
        assert exc_info.value.path == str(missing)


class TestScanDirectory:
    """Test scanning a configured target."""

    def test_debug_log_included_other_log_excluded(self, root: Path, make_target) -> None:
        for name in ("debug.log", "other.log", "main.py"):
            (root / name).write_text(name)
        target = make_target(exclude=(r".*\.log$",), include=(r"debug\.log$",))

        result = scan_directory(target)

        assert sorted(result) == ["debug.log", "main.py"]

    def test_tracked_files_are_logged(self, root: Path, make_target, tmp_path: Path) -> None:
        (root / "main.py").write_text("x")
        (root / "skip.tmp").write_text("x")
        target = make_target(exclude=(r"\.tmp$",))

        scan_directory(target, get_target_logger(target))

        text = (tmp_path / "watch.log").read_text()
        assert "File tracked: main.py" in text
        assert "skip.tmp" not in text

    def test_scan_is_recomputed_each_call(self, root: Path, make_target) -> None:
        target = make_target()
        assert scan_directory(target) == []

        (root / "new.py").write_text("x")
        assert scan_directory(target) == ["new.py"]
