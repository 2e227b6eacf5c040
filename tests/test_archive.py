"""
Tests for the archive extractor — streaming .tar.gz with top-level stripping.
"""

import os
from pathlib import Path

import pytest

from jbupdater.core.errors import (
    ExtractionError,
    ExtractionIOFailure,
    UnsafeArchiveEntry,
    UnsupportedArchiveEntryType,
)
from jbupdater.core.services.archive import DEFAULT_DIR_MODE, extract_tar_gz


def _mode(path: Path) -> int:
    return path.stat().st_mode & 0o7777


@pytest.fixture
def strict_umask():
    """Run with a umask that would strip group and other bits."""
    previous = os.umask(0o077)
    yield
    os.umask(previous)


class TestExtract:
    def test_strips_top_level_directory(self, tmp_path: Path, ide_archive: Path):
        dest = tmp_path / "dest"
        extract_tar_gz(ide_archive, dest)

        assert (dest / "a.txt").read_bytes() == b"alpha\n"
        assert (dest / "sub" / "b.txt").read_bytes() == b"bravo\n"
        assert not (dest / "root").exists()

    def test_preserves_file_modes(self, tmp_path: Path, ide_archive: Path):
        dest = tmp_path / "dest"
        extract_tar_gz(ide_archive, dest)

        assert _mode(dest / "a.txt") == 0o644
        assert _mode(dest / "sub" / "b.txt") == 0o755

    def test_returns_entry_count(self, tmp_path: Path, ide_archive: Path):
        assert extract_tar_gz(ide_archive, tmp_path / "dest") == 4

    def test_archive_without_directory_entries(self, tmp_path: Path, make_archive):
        archive = make_archive([
            ("idea-IU-1.2/bin/idea.sh", "file", b"#!/bin/sh\n", 0o755),
            ("idea-IU-1.2/lib/app.jar", "file", b"PK", 0o644),
        ])
        dest = tmp_path / "dest"
        extract_tar_gz(archive, dest)

        assert (dest / "bin" / "idea.sh").read_bytes() == b"#!/bin/sh\n"
        assert (dest / "lib" / "app.jar").read_bytes() == b"PK"

    def test_missing_parents_get_default_mode(self, tmp_path: Path, make_archive, strict_umask):
        archive = make_archive([
            ("idea-IU-1.2/bin/idea.sh", "file", b"#!/bin/sh\n", 0o755),
            ("idea-IU-1.2/lib/ext/app.jar", "file", b"PK", 0o644),
        ])
        dest = tmp_path / "dest"
        extract_tar_gz(archive, dest)

        for directory in (dest, dest / "bin", dest / "lib", dest / "lib" / "ext"):
            assert _mode(directory) == DEFAULT_DIR_MODE
        assert _mode(dest / "bin" / "idea.sh") == 0o755

    def test_top_level_name_taken_from_first_entry(self, tmp_path: Path, make_archive):
        # Later entries lose as many leading characters as the first top dir
        archive = make_archive([
            ("abc/", "dir", None, 0o755),
            ("abc/one.txt", "file", b"1", 0o644),
            ("xyz/two.txt", "file", b"2", 0o644),
        ])
        dest = tmp_path / "dest"
        extract_tar_gz(archive, dest)

        assert (dest / "one.txt").read_bytes() == b"1"
        assert (dest / "two.txt").read_bytes() == b"2"

    def test_existing_destination_is_fine(self, tmp_path: Path, ide_archive: Path):
        dest = tmp_path / "dest"
        (dest / "sub").mkdir(parents=True)
        extract_tar_gz(ide_archive, dest)
        assert (dest / "sub" / "b.txt").is_file()

    def test_existing_file_is_truncated(self, tmp_path: Path, ide_archive: Path):
        dest = tmp_path / "dest"
        dest.mkdir()
        (dest / "a.txt").write_bytes(b"a much longer previous content\n")
        (dest / "a.txt").chmod(0o600)

        extract_tar_gz(ide_archive, dest)

        assert (dest / "a.txt").read_bytes() == b"alpha\n"
        assert _mode(dest / "a.txt") == 0o644

    def test_large_file_is_copied_intact(self, tmp_path: Path, make_archive):
        payload = bytes(range(256)) * 20_000
        archive = make_archive([
            ("root/", "dir", None, 0o755),
            ("root/big.bin", "file", payload, 0o644),
        ])
        dest = tmp_path / "dest"
        extract_tar_gz(archive, dest)
        assert (dest / "big.bin").read_bytes() == payload


class TestUnsupportedEntries:
    def test_symlink_stops_extraction(self, tmp_path: Path, make_archive):
        archive = make_archive([
            ("root/", "dir", None, 0o755),
            ("root/a.txt", "file", b"alpha", 0o644),
            ("root/link", "symlink", "a.txt", 0o777),
            ("root/z.txt", "file", b"zulu", 0o644),
        ])
        dest = tmp_path / "dest"

        with pytest.raises(UnsupportedArchiveEntryType) as exc:
            extract_tar_gz(archive, dest)

        assert exc.value.name == "root/link"
        assert exc.value.type_flag == "symlink"
        assert (dest / "a.txt").is_file()
        assert not (dest / "link").is_symlink()
        assert not (dest / "z.txt").exists()

    def test_unsupported_is_an_extraction_error(self, tmp_path: Path, make_archive):
        archive = make_archive([("root/link", "symlink", "elsewhere", 0o777)])
        with pytest.raises(ExtractionError):
            extract_tar_gz(archive, tmp_path / "dest")


class TestBrokenArchives:
    def test_not_gzip(self, tmp_path: Path):
        bogus = tmp_path / "bogus.tar.gz"
        bogus.write_bytes(b"this is not an archive")
        with pytest.raises(ExtractionIOFailure):
            extract_tar_gz(bogus, tmp_path / "dest")

    def test_missing_source(self, tmp_path: Path):
        with pytest.raises(ExtractionIOFailure):
            extract_tar_gz(tmp_path / "missing.tar.gz", tmp_path / "dest")

    def test_truncated_archive(self, tmp_path: Path, make_archive):
        payload = bytes(range(256)) * 4_000
        archive = make_archive([("root/big.bin", "file", payload, 0o644)])
        data = archive.read_bytes()
        archive.write_bytes(data[: len(data) // 2])

        with pytest.raises(ExtractionIOFailure):
            extract_tar_gz(archive, tmp_path / "dest")

    def test_path_traversal_is_refused(self, tmp_path: Path, make_archive):
        archive = make_archive([
            ("root/", "dir", None, 0o755),
            ("root/../../evil.txt", "file", b"x", 0o644),
        ])
        dest = tmp_path / "deep" / "dest"

        with pytest.raises(UnsafeArchiveEntry):
            extract_tar_gz(archive, dest)
        assert not (tmp_path / "evil.txt").exists()
