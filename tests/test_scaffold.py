from __future__ import annotations

from pathlib import Path

import pytest

from odo_cli import scaffold
from odo_cli.errors import WriteError
from tests.fakes import snapshot


def test_write_creates_devfile(tmp_path: Path):
    result = scaffold.write(tmp_path, b"schemaVersion: 2.2.0\n")

    assert (tmp_path / "devfile.yaml").read_bytes() == b"schemaVersion: 2.2.0\n"
    assert result.written == ["devfile.yaml"]
    assert result.skipped == []
    assert result.ignored == []
    assert result.preserved == []


def test_write_keeps_existing_files_untouched(tmp_path: Path):
    (tmp_path / "main.go").write_bytes(b"package mine\n")
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "util.go").write_bytes(b"package pkg\n")
    before = snapshot(tmp_path)

    result = scaffold.write(
        tmp_path,
        b"schemaVersion: 2.2.0\n",
        [("main.go", b"package starter\n"), ("pkg/util.go", b"x"), ("README.md", b"# starter\n")],
    )

    after = snapshot(tmp_path)
    for name, content in before.items():
        assert after[name] == content
    assert result.skipped == ["main.go", "pkg/util.go"]
    assert result.written == ["README.md", "devfile.yaml"]
    assert result.preserved == ["main.go", "pkg"]


def test_write_creates_nested_starter_directories(tmp_path: Path):
    scaffold.write(tmp_path, b"d", [("cmd/server/main.go", b"package main\n")])

    assert (tmp_path / "cmd" / "server" / "main.go").exists()


def test_starter_devfile_is_not_used(tmp_path: Path):
    result = scaffold.write(tmp_path, b"registry", [("devfile.yaml", b"starter")])

    assert (tmp_path / "devfile.yaml").read_bytes() == b"registry"
    assert result.ignored == ["devfile.yaml"]
    assert result.skipped == []
    assert result.written == ["devfile.yaml"]


def test_paths_outside_the_directory_are_refused(tmp_path: Path):
    target = tmp_path / "component"
    target.mkdir()

    result = scaffold.write(target, b"d", [("../escape.txt", b"x"), ("/etc/passwd", b"x")])

    assert not (tmp_path / "escape.txt").exists()
    assert result.ignored == ["../escape.txt", "/etc/passwd"]
    assert result.skipped == []


def test_existing_devfile_is_never_overwritten(tmp_path: Path):
    (tmp_path / "devfile.yaml").write_bytes(b"mine")

    with pytest.raises(WriteError):
        scaffold.write(tmp_path, b"theirs")

    assert (tmp_path / "devfile.yaml").read_bytes() == b"mine"


def test_failed_write_reports_partial_result(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    real_write = scaffold._write_file

    def failing_write(destination: Path, data: bytes) -> None:
        if destination.name == "second.txt":
            raise OSError("disk full")
        real_write(destination, data)

    monkeypatch.setattr(scaffold, "_write_file", failing_write)

    with pytest.raises(WriteError) as excinfo:
        scaffold.write(tmp_path, b"d", [("first.txt", b"1"), ("second.txt", b"2"), ("third.txt", b"3")])

    assert excinfo.value.result.written == ["first.txt"]
    assert (tmp_path / "first.txt").exists()
    assert not (tmp_path / "third.txt").exists()
    assert not (tmp_path / "devfile.yaml").exists()


def test_interrupted_file_write_leaves_no_partial_file(tmp_path: Path):
    destination = tmp_path / "data.bin"

    with pytest.raises(TypeError):
        scaffold._write_file(destination, object())  # type: ignore[arg-type]

    assert not destination.exists()


def test_preserved_lists_top_level_entries_only(tmp_path: Path):
    (tmp_path / "node_modules" / "left-pad").mkdir(parents=True)
    (tmp_path / "node_modules" / "left-pad" / "index.js").write_bytes(b"")
    (tmp_path / "package.json").write_bytes(b"{}")

    result = scaffold.write(tmp_path, b"d", [("node_modules/left-pad/index.js", b"starter")])

    assert result.preserved == ["node_modules", "package.json"]
    assert result.skipped == ["node_modules/left-pad/index.js"]
    assert (tmp_path / "node_modules" / "left-pad" / "index.js").read_bytes() == b""
