from __future__ import annotations

import io
from typing import BinaryIO

import zstandard

from .constants import SNIFF_LEN, ZSTD_MAGIC


class _Replay(io.RawIOBase):
    """Raw stream that returns already-sniffed bytes before the rest of ``stream``."""

    def __init__(self, head: bytes, stream: BinaryIO):
        self._head = head
        self._stream = stream

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self._head:
            data, self._head = self._head[: len(b)], self._head[len(b) :]
        else:
            data = self._stream.read(len(b))
        n = len(data)
        b[:n] = data
        return n


def _peekable(stream: BinaryIO) -> BinaryIO:
    if hasattr(stream, "peek"):
        return stream
    return io.BufferedReader(stream)  # type: ignore[arg-type]


def _sniff(stream: BinaryIO):
    head = stream.peek(SNIFF_LEN)[:SNIFF_LEN]
    if len(head) >= SNIFF_LEN:
        return head, stream
    # peek stops at what one raw read returned; a pipe may hand over fewer bytes
    head = b""
    while len(head) < SNIFF_LEN:
        chunk = stream.read(SNIFF_LEN - len(head))
        if not chunk:
            break
        head += chunk
    return head, io.BufferedReader(_Replay(head, stream))


def open_input(stream: BinaryIO) -> BinaryIO:
    """Return a readable binary stream of raw tar bytes.

    gzip, bzip2 and xz streams are left for tarfile's ``r|*`` detection; zstd
    frames are decoded here. Sniffed bytes are handed back to the decoder.
    """
    head, stream = _sniff(_peekable(stream))
    if head == ZSTD_MAGIC:
        d = zstandard.ZstdDecompressor()
        return d.stream_reader(stream, read_across_frames=True, closefd=False)
    return stream
