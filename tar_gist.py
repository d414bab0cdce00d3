"""
tar-gist Pipeline
=================

Packs filesystem paths into a single armored text blob and back:

    paths -> tar stream -> compressed blob -> TAR-GIST envelope
    TAR-GIST envelope -> compressed blob -> tar stream -> list | extract

Each stage runs to completion before the next starts, and the first error
from any stage aborts the whole invocation.

Usage:
    from tar_gist import TarGistPipeline

    pipeline = TarGistPipeline()
    text = pipeline.compress(["docs", "setup.py"])

    for line in pipeline.list(text):
        print(line)
"""

import logging
import time
from pathlib import Path
from typing import Iterator, List, Optional, Union

from gist_configs import GistConfig
from gist_store import GistRecord, GistStore
from pipeline.stages.archive import ArchiveBuilder
from pipeline.stages.compression import ArchiveCompressor
from pipeline.stages.envelope import decode_envelope, encode_envelope
from pipeline.stages.reader import ArchiveReader, extract_archive, list_archive

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

COMPRESSION_HEADER = "Compression"
DEFAULT_COMPRESSION = "gzip"


class TarGistPipeline:
    """Main orchestrator for the tar-gist codec pipeline"""

    def __init__(self, config: Optional[GistConfig] = None,
                 store: Optional[GistStore] = None):
        self.config = config or GistConfig()
        self.builder = ArchiveBuilder()
        self.compressor = ArchiveCompressor(self.config.compression,
                                            self.config.compression_level)
        self._store = store

    @property
    def store(self) -> GistStore:
        if self._store is None:
            self._store = GistStore(self.config)
        return self._store

    def compress(self, paths: List[str]) -> str:
        """
        Archive, compress and armor ``paths``.

        Args:
            paths: Files, directories and symlinks, in archive order

        Returns:
            The envelope text
        """
        start = time.perf_counter()
        archive = self.builder.build(paths)
        compressed = self.compressor.compress(archive)

        headers = {}
        if self.compressor.algorithm != DEFAULT_COMPRESSION:
            headers[COMPRESSION_HEADER] = self.compressor.algorithm
        text = encode_envelope(compressed, headers=headers,
                               envelope_type=self.config.envelope_type)

        logger.info(f"Packed {len(paths)} paths into {len(text)} chars "
                    f"in {time.perf_counter() - start:.3f}s")
        return text

    def uncompress(self, text: str) -> ArchiveReader:
        """
        Unwrap and decompress an envelope into a readable archive stream.

        Raises:
            MalformedEnvelopeError: ``text`` holds no armored block
            WrongEnvelopeTypeError: the block is not a tar-gist payload
            CompressionFormatError: the payload is corrupt
        """
        envelope = decode_envelope(text, expected_type=self.config.envelope_type)
        archive = self.compressor.decompress(envelope.payload,
                                             algorithm=envelope.headers.get(COMPRESSION_HEADER))
        return ArchiveReader.from_bytes(archive)

    def list(self, text: str) -> Iterator[str]:
        return list_archive(self.uncompress(text))

    def extract(self, text: str, destination: Union[str, Path] = '.') -> int:
        return extract_archive(
            self.uncompress(text),
            destination,
            preserve_mode=self.config.preserve_mode,
            allow_unsafe_paths=self.config.allow_unsafe_paths,
        )

    def publish(self, paths: List[str]) -> GistRecord:
        """Compress ``paths`` and store the envelope as a new gist."""
        return self.store.create(self.compress(paths))

    def fetch(self, gist_id: str) -> ArchiveReader:
        """Download gist ``gist_id`` and open its archive."""
        return self.uncompress(self.store.get(gist_id))


def compress(paths: List[str], config: Optional[GistConfig] = None) -> str:
    """Convenience function for a one-off compress."""
    return TarGistPipeline(config).compress(paths)


def uncompress(text: str, config: Optional[GistConfig] = None) -> ArchiveReader:
    """Convenience function for a one-off uncompress."""
    return TarGistPipeline(config).uncompress(text)
