#!/usr/bin/env python3
# cmdengine/db/output.py
from __future__ import annotations

"""
Output sizing policy for the audit log.

Every command output gets a short inline preview. Longer outputs are
also stored in full: verbatim when small, gzip+base64 text when above
the compression threshold, and cut down to MAX_OUTPUT_SIZE characters
(with a trailer) when very large.

Compression and decompression never raise. A failed compression stores
the raw text; a failed decompression returns its input unchanged, so a
stored value that was never compressed reads back as-is.
"""

import base64
import binascii
import gzip
import zlib
from dataclasses import dataclass

PREVIEW_LENGTH = 200
COMPRESSION_THRESHOLD = 1024   # 1 KiB
MAX_OUTPUT_SIZE = 10 * 1024    # 10 KiB


@dataclass(frozen=True, slots=True)
class ProcessedOutput:
    preview: str
    full_output: str | None
    compressed: bool
    truncated: bool

    @property
    def output_type(self) -> str:
        return "COMPRESSED" if self.compressed else "TEXT"


def make_preview(output: str) -> str:
    """First PREVIEW_LENGTH characters, with '...' when cut."""
    if len(output) > PREVIEW_LENGTH:
        return output[:PREVIEW_LENGTH] + "..."
    return output


def compress(text: str) -> tuple[str, bool]:
    """Return (stored_text, compressed_flag); falls back to the raw text on error."""
    try:
        packed = gzip.compress(text.encode("utf-8"))
        return base64.b64encode(packed).decode("ascii"), True
    except (OSError, ValueError, UnicodeError):
        return text, False


def decompress(stored: str) -> str:
    """Reverse compress(); anything that does not decode is returned unchanged."""
    try:
        packed = base64.b64decode(stored.encode("ascii"), validate=True)
        return gzip.decompress(packed).decode("utf-8")
    except (binascii.Error, OSError, EOFError, zlib.error, ValueError, UnicodeError):
        return stored


def process(output: str) -> ProcessedOutput:
    """Decide what to store for `output`: preview plus optional full text."""
    preview = make_preview(output)

    if len(output) <= PREVIEW_LENGTH:
        return ProcessedOutput(preview=preview, full_output=None, compressed=False, truncated=False)

    if len(output) > MAX_OUTPUT_SIZE:
        cut = output[:MAX_OUTPUT_SIZE] + \
            f"\n\n... Output truncated ({len(output)} total characters)"
        stored, compressed = cut, False
        if len(cut) > COMPRESSION_THRESHOLD:
            stored, compressed = compress(cut)
        return ProcessedOutput(preview=preview, full_output=stored, compressed=compressed, truncated=True)

    if len(output) > COMPRESSION_THRESHOLD:
        stored, compressed = compress(output)
        return ProcessedOutput(preview=preview, full_output=stored, compressed=compressed, truncated=False)

    return ProcessedOutput(preview=preview, full_output=output, compressed=False, truncated=False)


class OutputManager:
    """Namespace wrapper so the policy can be injected and swapped in tests."""

    process = staticmethod(process)
    compress = staticmethod(compress)
    decompress = staticmethod(decompress)
    make_preview = staticmethod(make_preview)
