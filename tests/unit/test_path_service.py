from __future__ import annotations

import os
from pathlib import Path

import pytest

from findex.services.path_service import RejectReason, resolve_download_path
from findex.text import Messages


@pytest.fixture()
def root(tmp_path) -> Path:
    base = tmp_path / "data"
    (base / "reports").mkdir(parents=True)
    (base / "reports" / "q1.csv").write_text("a,b\n", encoding="utf-8")
    (base / "notes.md").write_text("hello", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")
    return base


def test_resolves_file_inside_root(root):
    resolution = resolve_download_path(root, "reports/q1.csv")

    assert resolution.ok
    assert resolution.reason is None
    assert resolution.path == root / "reports" / "q1.csv"


def test_accepts_backslashes_and_dot_segments(root):
    resolution = resolve_download_path(root, "./reports\\q1.csv")

    assert resolution.ok
    assert resolution.path == root / "reports" / "q1.csv"


@pytest.mark.parametrize(
    "requested",
    ["../../etc/passwd", "..", "reports/../../secret.txt", "reports/../notes.md", "..\\secret.txt"],
)
def test_parent_segments_are_rejected(root, requested):
    resolution = resolve_download_path(root, requested)

    assert not resolution.ok
    assert resolution.path is None
    assert resolution.reason is RejectReason.TRAVERSAL


@pytest.mark.parametrize("requested", ["", "   ", "/", "./", "."])
def test_empty_requests_are_rejected(root, requested):
    assert resolve_download_path(root, requested).reason is RejectReason.EMPTY


def test_absolute_path_is_treated_as_relative(root):
    resolution = resolve_download_path(root, "/etc/passwd")

    assert resolution.reason is RejectReason.NOT_FOUND


def test_leading_slash_still_finds_file_under_root(root):
    resolution = resolve_download_path(root, "/notes.md")

    assert resolution.ok
    assert resolution.path == root / "notes.md"


def test_drive_letters_and_nul_bytes_are_rejected(root):
    assert resolve_download_path(root, "C:/Windows/win.ini").reason is RejectReason.OUTSIDE_ROOT
    assert resolve_download_path(root, "notes.md\x00.txt").reason is RejectReason.OUTSIDE_ROOT


def test_missing_file_is_not_found(root):
    assert resolve_download_path(root, "reports/q2.csv").reason is RejectReason.NOT_FOUND


def test_directory_is_not_a_file(root):
    assert resolve_download_path(root, "reports").reason is RejectReason.NOT_A_FILE


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlink_escaping_root_is_rejected(root, tmp_path):
    try:
        (root / "escape.txt").symlink_to(tmp_path / "secret.txt")
        (root / "escape_dir").symlink_to(tmp_path, target_is_directory=True)
    except OSError:
        pytest.skip("symlink creation not permitted")

    assert resolve_download_path(root, "escape.txt").reason is RejectReason.OUTSIDE_ROOT
    assert resolve_download_path(root, "escape_dir/secret.txt").reason is RejectReason.OUTSIDE_ROOT


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlink_inside_root_is_allowed(root):
    try:
        (root / "alias.md").symlink_to(root / "notes.md")
    except OSError:
        pytest.skip("symlink creation not permitted")

    resolution = resolve_download_path(root, "alias.md")

    assert resolution.ok
    assert resolution.path == root / "alias.md"


def test_reject_reasons_have_messages():
    assert RejectReason.TRAVERSAL.message == Messages.REASON_TRAVERSAL
    for reason in RejectReason:
        assert reason.message
