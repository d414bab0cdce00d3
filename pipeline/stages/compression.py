"""
Lossless compression of archive streams with gzip, LZ4 or Zstandard.
"""

import gzip
import io
import logging
import zlib
from typing import Dict, Optional, Type

import lz4.frame
import zstandard as zstd

from base_classes import CompressionCodec
from gist_errors import CompressionFormatError

logger = logging.getLogger(__name__)


class GzipCodec(CompressionCodec):
    """gzip member written through a close-to-flush writer"""

    name = 'gzip'
    magic = b'\x1f\x8b'
    min_level = 0
    max_level = 9
    default_level = 6

    def compress(self, data: bytes) -> bytes:
        buf = io.BytesIO()
        # mtime=0 keeps the output stable for identical input
        with gzip.GzipFile(fileobj=buf, mode='wb', compresslevel=self.level, mtime=0) as writer:
            writer.write(data)
        return buf.getvalue()

    def decompress(self, data: bytes) -> bytes:
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise CompressionFormatError("gzip: invalid compressed stream", cause=e) from e


class Lz4Codec(CompressionCodec):
    """LZ4 frame format"""

    name = 'lz4'
    magic = b'\x04\x22\x4d\x18'
    min_level = 0
    max_level = 16
    default_level = 0

    def compress(self, data: bytes) -> bytes:
        return lz4.frame.compress(data, compression_level=self.level)

    def decompress(self, data: bytes) -> bytes:
        try:
            return lz4.frame.decompress(data)
        except RuntimeError as e:
            raise CompressionFormatError("lz4: invalid compressed stream", cause=e) from e


class ZstdCodec(CompressionCodec):
    """Zstandard frame with the content size in its header"""

    name = 'zstd'
    magic = b'\x28\xb5\x2f\xfd'
    min_level = 1
    max_level = 22
    default_level = 3

    def compress(self, data: bytes) -> bytes:
        compressor = zstd.ZstdCompressor(level=self.level, write_content_size=True)
        return compressor.compress(data)

    def decompress(self, data: bytes) -> bytes:
        try:
            return zstd.ZstdDecompressor().decompress(data)
        except zstd.ZstdError as e:
            raise CompressionFormatError("zstd: invalid compressed stream", cause=e) from e


CODECS: Dict[str, Type[CompressionCodec]] = {
    GzipCodec.name: GzipCodec,
    Lz4Codec.name: Lz4Codec,
    ZstdCodec.name: ZstdCodec,
}


def get_codec(name: str, level: Optional[int] = None) -> CompressionCodec:
    """Instantiate the codec registered under ``name``."""
    try:
        codec_cls = CODECS[name]
    except KeyError:
        raise ValueError(f"Unknown compression algorithm: {name}") from None
    return codec_cls(level)


def detect_codec(data: bytes) -> CompressionCodec:
    """
    Pick a codec by sniffing the magic number at the start of ``data``.

    Raises:
        CompressionFormatError: if ``data`` is empty or matches no codec
    """
    if not data:
        raise CompressionFormatError("compressed stream is empty")
    for codec_cls in CODECS.values():
        codec = codec_cls()
        if codec.matches(data):
            return codec
    raise CompressionFormatError(
        "unrecognised compressed stream",
        details={'header': data[:4].hex()}
    )


class ArchiveCompressor:
    """
    Content-agnostic compressor for archive streams.

    Compression always uses the configured algorithm. Decompression trusts an
    explicit algorithm hint when given and otherwise detects the format from
    the stream itself, so payloads written with any codec stay readable.
    """

    def __init__(self, algorithm: str = 'gzip', level: Optional[int] = None):
        """
        Initialize the compressor.

        Args:
            algorithm: One of ``gzip``, ``lz4`` or ``zstd``
            level: Codec specific compression level, codec default when None
        """
        self.codec = get_codec(algorithm, level)
        logger.debug(f"Initialized ArchiveCompressor with algorithm={self.codec.name}, "
                     f"level={self.codec.level}")

    @property
    def algorithm(self) -> str:
        return self.codec.name

    def compress(self, data: bytes) -> bytes:
        compressed = self.codec.compress(data)
        if data:
            ratio = (1 - len(compressed) / len(data)) * 100
            logger.info(f"Compression complete: {len(data)} -> {len(compressed)} bytes "
                        f"({ratio:.1f}% reduction, {self.codec.name})")
        return compressed

    def decompress(self, data: bytes, algorithm: Optional[str] = None) -> bytes:
        """
        Decompress a blob produced by any supported codec.

        Args:
            data: Compressed bytes
            algorithm: Optional codec name overriding detection

        Returns:
            The original bytes

        Raises:
            CompressionFormatError: if the blob is empty, unknown or corrupt
        """
        if algorithm is not None:
            if algorithm not in CODECS:
                raise CompressionFormatError(f"unsupported compression: {algorithm}")
            if not data:
                raise CompressionFormatError("compressed stream is empty")
            codec = CODECS[algorithm]()
        else:
            codec = detect_codec(data)

        result = codec.decompress(data)
        logger.debug(f"Decompressed {len(data)} -> {len(result)} bytes ({codec.name})")
        return result
