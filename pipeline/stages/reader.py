"""
Archive reader: parses a tar stream back into entries for listing or extraction.
"""

import io
import logging
import os
import tarfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterator, Optional, Union

from base_classes import DirectoryEntry, Entry, FileEntry, SymlinkEntry
from gist_errors import ArchiveFormatError, ArchiveIOError, UnsafePathError

logger = logging.getLogger(__name__)


class ArchiveReader:
    """
    Lazy, single pass reader over an archive stream.

    Iterating yields one entry per supported tar member. The stream is read
    forward only; to read it again, build a new reader from the original
    bytes.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._consumed = False

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ArchiveReader':
        return cls(io.BytesIO(data))

    def __iter__(self) -> Iterator[Entry]:
        if self._consumed:
            raise ArchiveFormatError("archive stream already consumed")
        self._consumed = True
        return self._entries()

    def _entries(self) -> Iterator[Entry]:
        try:
            with tarfile.open(fileobj=self._stream, mode='r|') as tar:
                for member in tar:
                    entry = self._to_entry(tar, member)
                    if entry is not None:
                        yield entry
        except tarfile.TarError as e:
            raise ArchiveFormatError("tar: invalid archive stream", cause=e) from e

    @staticmethod
    def _to_entry(tar: tarfile.TarFile, member: tarfile.TarInfo) -> Optional[Entry]:
        if member.isdir():
            return DirectoryEntry(path=member.name, mode=member.mode, mtime=member.mtime)
        if member.issym():
            return SymlinkEntry(path=member.name, target=member.linkname,
                                mode=member.mode, mtime=member.mtime)
        if member.isreg():
            fileobj = tar.extractfile(member)
            content = fileobj.read() if fileobj is not None else b''
            return FileEntry(path=member.name, content=content,
                             mode=member.mode, mtime=member.mtime)

        logger.warning(f"Skipping unsupported archive member: {member.name}")
        return None


def list_archive(reader: ArchiveReader) -> Iterator[str]:
    """
    Describe every non-directory entry, one line each.

    Symlinks are shown as ``path -> target``; directories are omitted.
    """
    for entry in reader:
        if isinstance(entry, DirectoryEntry):
            continue
        if isinstance(entry, SymlinkEntry):
            yield f"{entry.path} -> {entry.target}"
        else:
            yield entry.path


def _check_path(name: str) -> None:
    pure = PurePosixPath(name)
    if pure.is_absolute() or '..' in pure.parts:
        raise UnsafePathError(name)


def _check_inside(path: Union[str, Path], base: Path, name: str) -> None:
    """Raise ``UnsafePathError`` unless ``path`` resolves below ``base``."""
    try:
        Path(path).resolve().relative_to(base)
    except ValueError as e:
        raise UnsafePathError(name) from e


def _check_entry(entry: Entry, target_path: Path, base: Path) -> None:
    # Links already on disk must not carry the write outside the destination
    _check_path(entry.path)
    if isinstance(entry, DirectoryEntry):
        _check_inside(target_path, base, entry.path)
        return
    _check_inside(target_path.parent, base, entry.path)
    if isinstance(entry, SymlinkEntry):
        _check_inside(target_path.parent / entry.target, base, entry.path)


def extract_archive(reader: ArchiveReader,
                    destination: Union[str, Path] = '.',
                    preserve_mode: bool = False,
                    allow_unsafe_paths: bool = False) -> int:
    """
    Restore entries below ``destination``.

    Directories are created with their missing ancestors and may already
    exist. A symlink is created only when its target already exists and
    nothing occupies the link path; otherwise it is skipped without error.
    Files are created or truncated and written verbatim.

    Args:
        reader: Source of entries
        destination: Directory the archive paths are relative to
        preserve_mode: Apply archived permission bits to regular files
        allow_unsafe_paths: Permit absolute paths, ``..`` components and
            symlinks that lead outside ``destination``

    Returns:
        Number of entries written to disk

    Raises:
        ArchiveIOError: on the first filesystem failure
        UnsafePathError: for paths escaping ``destination``
    """
    destination = Path(destination)
    base = destination.resolve()
    written = 0
    skipped = 0

    for entry in reader:
        target_path = destination / entry.path
        if not allow_unsafe_paths:
            _check_entry(entry, target_path, base)

        try:
            if isinstance(entry, DirectoryEntry):
                target_path.mkdir(parents=True, exist_ok=True)

            elif isinstance(entry, SymlinkEntry):
                link_target = os.path.join(os.path.dirname(target_path), entry.target)
                if not os.path.exists(link_target) or os.path.lexists(target_path):
                    logger.debug(f"Skipping symlink {entry.path} -> {entry.target}")
                    skipped += 1
                    continue
                os.symlink(entry.target, target_path)

            else:
                target_path.parent.mkdir(parents=True, exist_ok=True)
                with open(target_path, 'wb') as f:
                    f.write(entry.content)
                if preserve_mode:
                    os.chmod(target_path, entry.mode)

        except OSError as e:
            raise ArchiveIOError(f"cannot extract {entry.path}",
                                 path=str(target_path), cause=e) from e

        logger.debug(f"Extracted {entry.kind.value}: {entry.path}")
        written += 1

    logger.info(f"Extracted {written} entries into {destination} ({skipped} symlinks skipped)")
    return written
