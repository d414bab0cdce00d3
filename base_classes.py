"""
Base Classes for tar-gist
=========================

Contains the archive entry records and the abstract codec base class used
throughout the pipeline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class EntryKind(Enum):
    """Kinds of filesystem objects an archive can carry"""
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class DirectoryEntry:
    """A directory captured in the archive"""
    path: str
    mode: int = 0o755
    mtime: float = 0.0

    @property
    def kind(self) -> EntryKind:
        return EntryKind.DIRECTORY


@dataclass(frozen=True)
class FileEntry:
    """A regular file and its full content"""
    path: str
    content: bytes
    mode: int = 0o644
    mtime: float = 0.0

    @property
    def kind(self) -> EntryKind:
        return EntryKind.FILE

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class SymlinkEntry:
    """A symbolic link; only the target is recorded"""
    path: str
    target: str
    mode: int = 0o777
    mtime: float = 0.0

    @property
    def kind(self) -> EntryKind:
        return EntryKind.SYMLINK


Entry = Union[DirectoryEntry, FileEntry, SymlinkEntry]


class CompressionCodec(ABC):
    """Abstract base class for byte compressors"""

    name: str = ""
    magic: bytes = b""
    min_level: int = 0
    max_level: int = 0
    default_level: int = 0

    def __init__(self, level: Optional[int] = None):
        if level is None:
            level = self.default_level
        if not self.min_level <= level <= self.max_level:
            raise ValueError(
                f"{self.name} compression level must be between "
                f"{self.min_level} and {self.max_level}, got {level}"
            )
        self.level = level

    def matches(self, data: bytes) -> bool:
        """Check whether ``data`` starts with this codec's magic number."""
        return bool(self.magic) and data[:len(self.magic)] == self.magic

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        pass

    @abstractmethod
    def decompress(self, data: bytes) -> bytes:
        pass
