"""
Configurations for tar-gist
===========================

This module provides the pipeline settings and a few presets for common
trade-offs between speed, size and compatibility.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

ENVELOPE_TYPE = "TAR-GIST"
GIST_FILENAME = "tar-gist.pem"
GITHUB_API_URL = "https://api.github.com"

COMPRESSION_ALGORITHMS = ('gzip', 'lz4', 'zstd')


@dataclass
class GistConfig:
    """Configuration settings for the tar-gist pipeline"""

    # Compression settings
    compression: str = 'gzip'
    compression_level: Optional[int] = None

    # Envelope settings
    envelope_type: str = ENVELOPE_TYPE

    # Store settings
    api_url: str = GITHUB_API_URL
    gist_filename: str = GIST_FILENAME
    description: str = "tar-gist file"
    public: bool = False
    timeout_seconds: float = 30.0
    token: Optional[str] = None

    # Extraction settings
    preserve_mode: bool = False
    allow_unsafe_paths: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters"""
        if self.compression not in COMPRESSION_ALGORITHMS:
            raise ValueError(f"Invalid compression: {self.compression}")
        if self.compression_level is not None:
            # Imported here: the stages package reads ENVELOPE_TYPE from this module
            from pipeline.stages.compression import CODECS
            codec = CODECS[self.compression]
            low, high = codec.min_level, codec.max_level
            if not low <= self.compression_level <= high:
                raise ValueError(
                    f"compression_level for {self.compression} must be between {low} and {high}"
                )
        if not self.envelope_type or not self.envelope_type.strip():
            raise ValueError("envelope_type cannot be empty")
        if '-' * 5 in self.envelope_type or '\n' in self.envelope_type:
            raise ValueError(f"Invalid envelope_type: {self.envelope_type!r}")
        if not self.api_url.startswith(('http://', 'https://')):
            raise ValueError(f"Invalid api_url: {self.api_url}")
        if not self.gist_filename:
            raise ValueError("gist_filename cannot be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    @classmethod
    def from_env(cls, **overrides) -> 'GistConfig':
        """
        Build a configuration from environment variables.

        Reads ``TAR_GIST_COMPRESSION``, ``TAR_GIST_API_URL``,
        ``TAR_GIST_TIMEOUT`` and ``GITHUB_TOKEN``. Keyword arguments win over
        the environment.
        """
        values = {}
        if os.environ.get('TAR_GIST_COMPRESSION'):
            values['compression'] = os.environ['TAR_GIST_COMPRESSION']
        if os.environ.get('TAR_GIST_API_URL'):
            values['api_url'] = os.environ['TAR_GIST_API_URL']
        if os.environ.get('TAR_GIST_TIMEOUT'):
            try:
                values['timeout_seconds'] = float(os.environ['TAR_GIST_TIMEOUT'])
            except ValueError as e:
                raise ValueError(f"Invalid TAR_GIST_TIMEOUT: {os.environ['TAR_GIST_TIMEOUT']}") from e
        if os.environ.get('GITHUB_TOKEN'):
            values['token'] = os.environ['GITHUB_TOKEN']

        values.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug(f"Loaded config from environment: "
                     f"{sorted(k for k in values if k != 'token')}")
        return cls(**values)


class ConfigPresets:
    """Pre-configured settings for common use cases"""

    @staticmethod
    def default() -> GistConfig:
        """gzip payloads, readable by every tar-gist release"""
        return GistConfig()

    @staticmethod
    def fast() -> GistConfig:
        """
        Optimized for speed
        - LZ4 frames at the default level
        """
        return GistConfig(compression='lz4')

    @staticmethod
    def compact() -> GistConfig:
        """
        Optimized for the smallest paste
        - Zstandard at a high level
        """
        return GistConfig(compression='zstd', compression_level=19)
