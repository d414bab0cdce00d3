"""
Archive builder: walks filesystem paths and serializes them into a tar stream.
"""

import io
import logging
import os
import stat
import tarfile
from typing import Iterable, Iterator, List

from base_classes import DirectoryEntry, Entry, FileEntry, SymlinkEntry
from gist_errors import ArchiveIOError

logger = logging.getLogger(__name__)


def archive_name(path: str) -> str:
    """Strip exactly one leading separator; every other form is kept verbatim."""
    if path.startswith(os.sep):
        return path[len(os.sep):]
    return path


def entry_to_tarinfo(entry: Entry) -> tarfile.TarInfo:
    """Build the tar header describing ``entry``."""
    info = tarfile.TarInfo(name=entry.path)
    info.mode = entry.mode
    info.mtime = int(entry.mtime)
    if isinstance(entry, DirectoryEntry):
        info.type = tarfile.DIRTYPE
    elif isinstance(entry, SymlinkEntry):
        info.type = tarfile.SYMTYPE
        info.linkname = entry.target
    else:
        info.type = tarfile.REGTYPE
        info.size = entry.size
    return info


class ArchiveBuilder:
    """
    Serializes files, directories and symlinks into an in-memory tar stream.

    Inputs are classified without following symlinks. Directories are walked
    in pre-order with children sorted by name. The whole build either
    succeeds or raises ``ArchiveIOError``; no partial archive is returned.
    """

    def __init__(self):
        self.entry_count = 0
        self.content_bytes = 0

    def _entry_for(self, path: str, st: os.stat_result) -> Entry:
        name = archive_name(path)
        mode = stat.S_IMODE(st.st_mode)

        if stat.S_ISDIR(st.st_mode):
            return DirectoryEntry(path=name, mode=mode, mtime=st.st_mtime)
        if stat.S_ISLNK(st.st_mode):
            return SymlinkEntry(path=name, target=os.readlink(path),
                                mode=mode, mtime=st.st_mtime)

        with open(path, 'rb') as f:
            content = f.read()
        return FileEntry(path=name, content=content, mode=mode, mtime=st.st_mtime)

    def iter_entries(self, path: str) -> Iterator[Entry]:
        """
        Yield entries for ``path`` and, for directories, every descendant.

        Args:
            path: File, directory or symlink to capture

        Yields:
            One entry per visited node, directories before their children

        Raises:
            ArchiveIOError: on any filesystem failure
        """
        try:
            st = os.lstat(path)
            if not (stat.S_ISDIR(st.st_mode) or stat.S_ISLNK(st.st_mode)
                    or stat.S_ISREG(st.st_mode)):
                logger.warning(f"Skipping unsupported file type: {path}")
                return
            entry = self._entry_for(path, st)
            children = sorted(os.listdir(path)) if isinstance(entry, DirectoryEntry) else []
        except OSError as e:
            raise ArchiveIOError(f"cannot archive {path}", path=path, cause=e) from e

        logger.debug(f"Adding {entry.kind.value}: {entry.path}")
        yield entry

        for child in children:
            yield from self.iter_entries(os.path.join(path, child))

    def build(self, paths: Iterable[str]) -> bytes:
        """
        Build a tar stream from ``paths`` in the given order.

        Args:
            paths: Filesystem paths; absolute paths lose one leading separator

        Returns:
            The complete archive stream, end marker included
        """
        self.entry_count = 0
        self.content_bytes = 0
        buf = io.BytesIO()

        with tarfile.open(fileobj=buf, mode='w', format=tarfile.PAX_FORMAT) as tar:
            for path in paths:
                for entry in self.iter_entries(path):
                    info = entry_to_tarinfo(entry)
                    if isinstance(entry, FileEntry):
                        tar.addfile(info, io.BytesIO(entry.content))
                        self.content_bytes += entry.size
                    else:
                        tar.addfile(info)
                    self.entry_count += 1

        data = buf.getvalue()
        logger.info(f"Archived {self.entry_count} entries "
                    f"({self.content_bytes} content bytes, {len(data)} archive bytes)")
        return data


def build_archive(paths: List[str]) -> bytes:
    """Convenience wrapper around :class:`ArchiveBuilder`."""
    return ArchiveBuilder().build(paths)
