"""
Error Taxonomy for tar-gist
===========================

Every pipeline stage raises one of these to its caller. Nothing is retried;
the first error aborts the whole invocation.

- ``ArchiveIOError``: filesystem failures while building or extracting
- ``FormatError``: data that is corrupt or not ours (compression, tar, PEM)
- ``StoreError``: failures talking to the remote gist store
"""

import time
from typing import Any, Dict, Optional


class TarGistError(Exception):
    """Base class for all tar-gist errors"""

    default_code: Optional[str] = None

    def __init__(self, message: str, cause: Optional[Exception] = None,
                 error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize the error.

        Args:
            message: Error description
            cause: Original exception that caused this error
            error_code: Specific error code for categorization
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.timestamp = time.time()

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(message={self.message!r}, "
                f"cause={self.cause!r}, error_code={self.error_code!r}, "
                f"details={self.details!r})")

    def log_context(self) -> Dict[str, Any]:
        """Get error context for structured logging"""
        return {
            'error_type': type(self).__name__,
            'error_code': self.error_code,
            'message': str(self),
            'timestamp': self.timestamp,
            'details': self.details,
            'cause': str(self.cause) if self.cause else None
        }


class ArchiveIOError(TarGistError):
    """A stat, read, write or mkdir failed"""

    default_code = "E_FILESYSTEM"

    def __init__(self, message: str, path: Optional[str] = None,
                 cause: Optional[Exception] = None, **kwargs):
        super().__init__(message, cause=cause, **kwargs)
        self.path = path
        if path is not None:
            self.details.setdefault('path', path)


class FormatError(TarGistError):
    """Input bytes or text are not a valid tar-gist payload"""

    default_code = "E_FORMAT"


class CompressionFormatError(FormatError):
    """The compressed blob is empty, unrecognised or corrupt"""

    default_code = "E_COMPRESSION"


class ArchiveFormatError(FormatError):
    """The tar stream is corrupt, truncated or already consumed"""

    default_code = "E_ARCHIVE"


class UnsafePathError(ArchiveFormatError):
    """An archive member would be written outside the destination"""

    default_code = "E_UNSAFE_PATH"

    def __init__(self, path: str, **kwargs):
        super().__init__(f"refusing to extract unsafe path: {path}", **kwargs)
        self.path = path
        self.details.setdefault('path', path)


class EnvelopeError(FormatError):
    """Base class for armored envelope failures"""


class MalformedEnvelopeError(EnvelopeError):
    """The text holds no well formed armored block"""

    default_code = "E_PEM_MALFORMED"


class WrongEnvelopeTypeError(EnvelopeError):
    """The armored block parsed but carries a foreign type label"""

    default_code = "E_PEM_TYPE"

    def __init__(self, found_type: str, expected_type: str, **kwargs):
        super().__init__(f"pem: invalid PEM type: {found_type}", **kwargs)
        self.found_type = found_type
        self.expected_type = expected_type
        self.details.update({'found_type': found_type,
                             'expected_type': expected_type})


class StoreError(TarGistError):
    """The remote gist store failed or answered with something unusable"""

    default_code = "E_STORE"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if status_code is not None:
            self.details.setdefault('status_code', status_code)
