from __future__ import annotations

from pathlib import Path

import pytest

import findex.utils as utils


def test_resolve_directory_validates(tmp_path):
    with pytest.raises(FileNotFoundError):
        utils.resolve_directory(tmp_path / "missing")

    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        utils.resolve_directory(file_path)

    assert utils.resolve_directory(tmp_path) == tmp_path.resolve()


def test_relative_posix(tmp_path):
    nested = tmp_path / "a" / "b" / "c.txt"

    assert utils.relative_posix(nested, tmp_path) == "a/b/c.txt"
    assert utils.relative_posix(tmp_path, tmp_path) == ""


def test_format_path_relative_and_fallback(tmp_path):
    base = tmp_path / "root"
    inside = base / "reports" / "q1.csv"

    assert utils.format_path(inside, base) == "./reports/q1.csv"
    assert utils.format_path(Path("/elsewhere/file.txt"), base) == str(Path("/elsewhere/file.txt"))
    assert utils.format_path(inside) == str(inside)


def test_ensure_non_negative():
    assert utils.ensure_non_negative(0, "top") == 0
    assert utils.ensure_non_negative(3, "top") == 3
    with pytest.raises(ValueError, match="top must be >= 0"):
        utils.ensure_non_negative(-1, "top")
