"""
Armored text envelopes for compressed archives.

Payloads are wrapped in a PEM style block::

    -----BEGIN TAR-GIST-----
    Compression: lz4

    H4sIAAAAAAAA/+zT...
    -----END TAR-GIST-----

Header lines are optional and followed by a blank line. The body is base64
wrapped at 64 columns, so the envelope is plain ASCII and survives JSON and
text-only transports.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from gist_configs import ENVELOPE_TYPE
from gist_errors import MalformedEnvelopeError, WrongEnvelopeTypeError

logger = logging.getLogger(__name__)

LINE_LENGTH = 64

_BLOCK_RE = re.compile(
    r"-----BEGIN (?P<type>[^\r\n]*?)-----[ \t]*\r?\n"
    r"(?P<body>.*?)"
    r"-----END (?P<end>[^\r\n]*?)-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class Envelope:
    """A decoded armored block"""
    type: str
    payload: bytes
    headers: Dict[str, str] = field(default_factory=dict)


def encode_envelope(payload: bytes,
                    headers: Optional[Dict[str, str]] = None,
                    envelope_type: str = ENVELOPE_TYPE) -> str:
    """
    Wrap ``payload`` in an armored block labelled ``envelope_type``.

    Args:
        payload: Binary payload, typically a compressed archive
        headers: Optional ``Key: value`` headers written before the body
        envelope_type: Block label

    Returns:
        ASCII text ending with a newline
    """
    lines = [f"-----BEGIN {envelope_type}-----"]
    if headers:
        for key, value in headers.items():
            if ':' in key or '\n' in key or '\n' in value:
                raise ValueError(f"Invalid envelope header: {key!r}")
            lines.append(f"{key}: {value}")
        lines.append("")

    encoded = base64.b64encode(payload).decode('ascii')
    lines.extend(encoded[i:i + LINE_LENGTH] for i in range(0, len(encoded), LINE_LENGTH))
    lines.append(f"-----END {envelope_type}-----")

    text = "\n".join(lines) + "\n"
    logger.debug(f"Encoded {len(payload)} byte payload into {len(text)} chars of {envelope_type}")
    return text


def _split_headers(body_lines):
    headers: Dict[str, str] = {}
    index = 0
    while index < len(body_lines):
        key, sep, value = body_lines[index].partition(':')
        if not sep:
            break
        headers[key.strip()] = value.strip()
        index += 1
    if headers and index < len(body_lines) and not body_lines[index].strip():
        index += 1
    return headers, body_lines[index:]


def decode_envelope(text: str, expected_type: str = ENVELOPE_TYPE) -> Envelope:
    """
    Parse the first armored block found in ``text``.

    Anything before the BEGIN line is ignored.

    Raises:
        MalformedEnvelopeError: no block, mismatched END label or bad base64
        WrongEnvelopeTypeError: a valid block with a label other than
            ``expected_type``
    """
    match = _BLOCK_RE.search(text)
    if match is None:
        raise MalformedEnvelopeError("pem: failed to extract compressed content from PEM")

    block_type = match.group('type')
    if match.group('end') != block_type:
        raise MalformedEnvelopeError(
            f"pem: END label {match.group('end')!r} does not match BEGIN label {block_type!r}"
        )

    headers, body_lines = _split_headers(match.group('body').splitlines())
    encoded = "".join(line.strip() for line in body_lines)
    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEnvelopeError("pem: invalid base64 body", cause=e) from e

    if block_type != expected_type:
        raise WrongEnvelopeTypeError(block_type, expected_type)

    logger.debug(f"Decoded {block_type} envelope with {len(payload)} byte payload")
    return Envelope(type=block_type, payload=payload, headers=headers)
