"""
Pipeline stages for the tar-gist codec.
"""

from .archive import ArchiveBuilder, build_archive
from .compression import ArchiveCompressor, detect_codec, get_codec
from .envelope import Envelope, decode_envelope, encode_envelope
from .reader import ArchiveReader, extract_archive, list_archive

__all__ = [
    'ArchiveBuilder',
    'build_archive',
    'ArchiveCompressor',
    'detect_codec',
    'get_codec',
    'Envelope',
    'decode_envelope',
    'encode_envelope',
    'ArchiveReader',
    'extract_archive',
    'list_archive',
]
