"""
Archive extractor — unpack a vendor .tar.gz into an install directory.

Release archives wrap everything in one top-level directory
(``idea-IU-193.5233.102/...``). That directory is stripped, so
``topdir/bin/idea.sh`` lands at ``<destination>/bin/idea.sh``.

The archive is read as a stream, one entry at a time, and file content
is copied in chunks. Nothing is buffered in full.

Preconditions on accepted archives:
    - Only directories and regular files. Anything else (symlinks,
      hard links, devices, FIFOs) stops the extraction.
    - One uniform top-level directory. Its name is taken from the first
      entry whose path contains a separator, and the same number of
      leading characters is cut from every later entry without checking
      that they share it.

A failure leaves whatever was already written in place; the caller
decides whether to clean up.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from pathlib import Path

from jbupdater.core.errors import (
    ExtractionIOFailure,
    UnsafeArchiveEntry,
    UnsupportedArchiveEntryType,
)

logger = logging.getLogger(__name__)

# Mode for parent directories the archive does not list itself
DEFAULT_DIR_MODE = 0o755

_COPY_CHUNK = 1024 * 1024


def extract_tar_gz(source: Path, destination: Path) -> int:
    """Extract ``source`` into ``destination``, dropping the top-level directory.

    Returns:
        Number of entries written.

    Raises:
        UnsupportedArchiveEntryType: On the first entry that is neither a
            directory nor a regular file.
        UnsafeArchiveEntry: If an entry would resolve outside ``destination``.
        ExtractionIOFailure: On read, decompression or write errors.
    """
    root = destination.resolve()
    strip = -1
    written = 0

    try:
        # "r|gz" reads sequentially; members are never loaded all at once
        with tarfile.open(str(source), mode="r|gz") as tar:
            for member in tar:
                # tarfile drops the trailing slash of directory names
                name = member.name + "/" if member.isdir() else member.name
                if strip == -1:
                    strip = name.find("/")

                relative = name[strip + 1:]
                target = _safe_target(root, relative, member.name)

                if member.isdir():
                    target.mkdir(mode=_entry_mode(member), parents=True, exist_ok=True)
                elif member.isreg():
                    _write_file(tar, member, target)
                else:
                    raise UnsupportedArchiveEntryType(member.name, _type_name(member))
                written += 1
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ExtractionIOFailure(f"Cannot extract {source} into {destination}: {e}") from e

    logger.debug("Extracted %d entries from %s into %s", written, source, destination)
    return written


def _safe_target(root: Path, relative: str, name: str) -> Path:
    """Resolve an entry path, refusing anything that escapes ``root``."""
    target = (root / relative).resolve()
    try:
        target.relative_to(root)
    except ValueError:
        raise UnsafeArchiveEntry(f"Entry {name!r} escapes {root} (path traversal)") from None
    return target


def _write_file(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    _make_parents(target.parent)

    mode = _entry_mode(member)
    src = tar.extractfile(member)
    if src is None:
        raise ExtractionIOFailure(f"No content stream for {member.name!r}")

    fd = os.open(target, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
    with src, os.fdopen(fd, "wb") as dst:
        shutil.copyfileobj(src, dst, _COPY_CHUNK)
    # O_CREAT's mode is masked by the umask and ignored for existing files
    os.chmod(target, mode)


def _make_parents(directory: Path) -> None:
    """Create missing ancestors of a file entry with DEFAULT_DIR_MODE."""
    missing: list[Path] = []
    while not directory.is_dir():
        missing.append(directory)
        directory = directory.parent
    for path in reversed(missing):
        path.mkdir(mode=DEFAULT_DIR_MODE, exist_ok=True)
        os.chmod(path, DEFAULT_DIR_MODE)


def _entry_mode(member: tarfile.TarInfo) -> int:
    return member.mode & 0o7777


_TYPE_NAMES = {
    tarfile.SYMTYPE: "symlink",
    tarfile.LNKTYPE: "hardlink",
    tarfile.CHRTYPE: "character device",
    tarfile.BLKTYPE: "block device",
    tarfile.FIFOTYPE: "fifo",
}


def _type_name(member: tarfile.TarInfo) -> str:
    return _TYPE_NAMES.get(member.type, repr(member.type))
