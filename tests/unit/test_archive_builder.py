"""
Unit tests for the archive builder
==================================

Tests for pipeline/stages/archive.py including:
- Entry classification without following symlinks
- Pre-order traversal with sorted children
- Leading separator stripping
- Failure propagation
"""

import builtins
import io
import os
import tarfile

import pytest

from base_classes import DirectoryEntry, EntryKind, FileEntry, SymlinkEntry
from gist_errors import ArchiveIOError
from pipeline.stages.archive import (
    ArchiveBuilder, archive_name, build_archive, entry_to_tarinfo
)


def read_members(data):
    with tarfile.open(fileobj=io.BytesIO(data), mode='r:') as tar:
        return tar.getmembers()


class TestArchiveName:
    """Test path normalization"""

    def test_absolute_path(self):
        assert archive_name("/tmp/x") == "tmp/x"

    def test_only_one_separator_stripped(self):
        assert archive_name("//tmp/x") == "/tmp/x"

    @pytest.mark.parametrize('path', ["tmp/x", "./x", "../x", "x/"])
    def test_relative_paths_unchanged(self, path):
        assert archive_name(path) == path


class TestIterEntries:
    """Test traversal of the filesystem"""

    def test_single_file(self, chdir):
        (chdir / "a.txt").write_bytes(b"content")

        entries = list(ArchiveBuilder().iter_entries("a.txt"))

        assert len(entries) == 1
        assert isinstance(entries[0], FileEntry)
        assert entries[0].path == "a.txt"
        assert entries[0].content == b"content"
        assert entries[0].kind is EntryKind.FILE

    def test_preorder_sorted_traversal(self, chdir):
        """Test directories come before children and children are sorted"""
        (chdir / "root" / "b_dir").mkdir(parents=True)
        (chdir / "root" / "c.txt").write_bytes(b"c")
        (chdir / "root" / "a.txt").write_bytes(b"a")
        (chdir / "root" / "b_dir" / "inner.txt").write_bytes(b"inner")

        paths = [entry.path for entry in ArchiveBuilder().iter_entries("root")]

        assert paths == [
            "root",
            os.path.join("root", "a.txt"),
            os.path.join("root", "b_dir"),
            os.path.join("root", "b_dir", "inner.txt"),
            os.path.join("root", "c.txt"),
        ]

    def test_symlink_not_followed(self, sample_tree):
        entries = list(ArchiveBuilder().iter_entries("d"))

        assert [type(e) for e in entries] == [DirectoryEntry, FileEntry, SymlinkEntry]
        link = entries[2]
        assert link.path == "d/b"
        assert link.target == "a.txt"

    def test_symlink_to_directory_not_descended(self, chdir):
        (chdir / "real").mkdir()
        (chdir / "real" / "f.txt").write_bytes(b"f")
        os.symlink("real", chdir / "alias")

        entries = list(ArchiveBuilder().iter_entries("alias"))

        assert entries == [SymlinkEntry(path="alias", target="real",
                                        mode=entries[0].mode, mtime=entries[0].mtime)]

    def test_dangling_symlink_recorded(self, chdir):
        os.symlink("missing", chdir / "dangling")

        entries = list(ArchiveBuilder().iter_entries("dangling"))

        assert entries[0].target == "missing"

    def test_mode_bits_recorded(self, chdir):
        path = chdir / "script.sh"
        path.write_bytes(b"#!/bin/sh\n")
        os.chmod(path, 0o750)

        entry = next(ArchiveBuilder().iter_entries("script.sh"))

        assert entry.mode == 0o750

    def test_absolute_path_stripped(self, temp_dir):
        path = temp_dir / "x"
        path.write_bytes(b"abs")

        entry = next(ArchiveBuilder().iter_entries(str(path)))

        assert entry.path == str(path)[1:]
        assert not entry.path.startswith("/")

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires mkfifo")
    def test_fifo_skipped(self, chdir):
        os.mkfifo(chdir / "pipe")

        assert list(ArchiveBuilder().iter_entries("pipe")) == []

    def test_missing_path(self, chdir):
        with pytest.raises(ArchiveIOError) as exc_info:
            list(ArchiveBuilder().iter_entries("nope"))

        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert exc_info.value.path == "nope"
        assert exc_info.value.error_code == "E_FILESYSTEM"


class TestBuild:
    """Test tar stream serialization"""

    def test_tar_members(self, sample_tree):
        members = read_members(build_archive(["d"]))

        assert [m.name for m in members] == ["d", "d/a.txt", "d/b"]
        assert members[0].isdir()
        assert members[1].isreg() and members[1].size == 2
        assert members[2].issym() and members[2].linkname == "a.txt"

    def test_file_content_in_stream(self, sample_tree):
        data = build_archive(["d/a.txt"])

        with tarfile.open(fileobj=io.BytesIO(data), mode='r:') as tar:
            assert tar.extractfile("d/a.txt").read() == b"hi"

    def test_absolute_input(self, temp_dir):
        """Test "/tmp/x"-style inputs are stored without the leading separator"""
        path = temp_dir / "x"
        path.write_bytes(b"abs")

        members = read_members(build_archive([str(path)]))

        assert [m.name for m in members] == [str(path)[1:]]

    def test_inputs_kept_in_order(self, chdir):
        for name in ("z.txt", "a.txt"):
            (chdir / name).write_bytes(name.encode())

        members = read_members(build_archive(["z.txt", "a.txt"]))

        assert [m.name for m in members] == ["z.txt", "a.txt"]

    def test_duplicate_inputs_not_deduplicated(self, chdir):
        (chdir / "a.txt").write_bytes(b"a")

        members = read_members(build_archive(["a.txt", "a.txt"]))

        assert [m.name for m in members] == ["a.txt", "a.txt"]

    def test_empty_path_list(self):
        assert read_members(build_archive([])) == []

    def test_builder_counts(self, sample_tree):
        builder = ArchiveBuilder()
        builder.build(["d"])

        assert builder.entry_count == 3
        assert builder.content_bytes == 2

    def test_failure_aborts_build(self, chdir):
        """Test one bad path fails the whole build"""
        (chdir / "good.txt").write_bytes(b"good")

        with pytest.raises(ArchiveIOError) as exc_info:
            build_archive(["good.txt", "missing.txt"])

        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0,
                        reason="root ignores file permissions")
    def test_unreadable_file_aborts_build(self, chdir):
        (chdir / "good.txt").write_bytes(b"good")
        secret = chdir / "secret.txt"
        secret.write_bytes(b"secret")
        os.chmod(secret, 0)

        try:
            with pytest.raises(ArchiveIOError) as exc_info:
                build_archive(["good.txt", "secret.txt"])
        finally:
            os.chmod(secret, 0o600)

        assert isinstance(exc_info.value.cause, PermissionError)

    def test_permission_denied_aborts_build(self, chdir, monkeypatch):
        """Test a read refused by the OS fails the whole build under any user"""
        (chdir / "good.txt").write_bytes(b"good")
        (chdir / "secret.txt").write_bytes(b"secret")
        real_open = builtins.open

        def guarded_open(path, *args, **kwargs):
            if os.path.basename(path) == "secret.txt":
                raise PermissionError(13, "Permission denied", path)
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr('pipeline.stages.archive.open', guarded_open, raising=False)

        with pytest.raises(ArchiveIOError) as exc_info:
            build_archive(["good.txt", "secret.txt"])

        assert isinstance(exc_info.value.cause, PermissionError)
        assert exc_info.value.path == "secret.txt"


class TestEntryToTarinfo:
    """Test header construction"""

    def test_directory_header(self):
        info = entry_to_tarinfo(DirectoryEntry(path="d", mode=0o700, mtime=12.7))

        assert info.isdir()
        assert info.mode == 0o700
        assert info.mtime == 12

    def test_symlink_header(self):
        info = entry_to_tarinfo(SymlinkEntry(path="l", target="t"))

        assert info.issym()
        assert info.linkname == "t"

    def test_file_header(self):
        info = entry_to_tarinfo(FileEntry(path="f", content=b"abc"))

        assert info.isreg()
        assert info.size == 3
