"""
tar-gist pipeline modules.
"""

# Import pipeline stages
from .stages.archive import ArchiveBuilder, build_archive
from .stages.compression import ArchiveCompressor
from .stages.envelope import Envelope, decode_envelope, encode_envelope
from .stages.reader import ArchiveReader, extract_archive, list_archive

__all__ = [
    'ArchiveBuilder',
    'build_archive',
    'ArchiveCompressor',
    'Envelope',
    'decode_envelope',
    'encode_envelope',
    'ArchiveReader',
    'extract_archive',
    'list_archive',
]
