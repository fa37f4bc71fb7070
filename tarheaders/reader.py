from __future__ import annotations

import lzma
import tarfile
import zlib
from typing import BinaryIO, Dict, Iterator, Optional, Tuple

import zstandard

from .codec import open_input
from .constants import (
    GNU_ATIME_SLICE,
    GNU_CTIME_SLICE,
    GNU_MAGIC,
    MAGIC_SLICE,
    NAME_ENCODING,
    NAME_ERRORS,
    STREAM_BUFSIZE,
    TYPE_XGLOBAL,
    USTAR_MAGIC,
    USTAR_PREFIX_SLICE,
)
from .errors import UnderlyingDecodeError, UnknownEntryTypeError
from .records import HeaderRecord, normalize


HeaderResult = Tuple[Optional[HeaderRecord], Optional[Exception]]

# Failures raised while pulling the next header out of the decoder stack
DECODE_ERRORS = (
    tarfile.TarError,
    zstandard.ZstdError,
    zlib.error,
    lzma.LZMAError,
    EOFError,
    OSError,
)


class HeaderInfo(tarfile.TarInfo):
    """TarInfo that also keeps the header magic and GNU atime/ctime fields.

    PAX global headers come back as entries of their own instead of being
    merged into the members that follow them.
    """

    __slots__ = ("magic", "gnu_atime", "gnu_ctime")

    def __init__(self, name=""):
        super().__init__(name)
        self.magic = b""
        self.gnu_atime = None
        self.gnu_ctime = None

    @classmethod
    def frombuf(cls, buf, encoding, errors):
        try:
            obj = super().frombuf(buf, encoding, errors)
        except tarfile.EmptyHeaderError as exc:
            # No more data: an empty input is an empty archive.
            raise tarfile.EOFHeaderError(str(exc)) from exc
        except (tarfile.InvalidHeaderError, tarfile.TruncatedHeaderError) as exc:
            # Plain TarFile.next() reads these as end-of-archive past offset 0.
            raise tarfile.SubsequentHeaderError(str(exc)) from exc
        obj.magic = buf[MAGIC_SLICE]
        if obj.magic == GNU_MAGIC:
            prefix = tarfile.nts(buf[USTAR_PREFIX_SLICE], encoding, errors)
            if prefix and obj.type not in tarfile.GNU_TYPES and obj.name.startswith(prefix + "/"):
                # tarfile joins the ustar prefix even for GNU headers
                obj.name = obj.name[len(prefix) + 1 :]
            obj.gnu_atime = _gnu_time(buf[GNU_ATIME_SLICE])
            obj.gnu_ctime = _gnu_time(buf[GNU_CTIME_SLICE])
        return obj

    def _proc_pax(self, archive):
        if self.type != TYPE_XGLOBAL:
            return super()._proc_pax(archive)
        # A global header is reported as its own entry. Its records are not
        # carried over to the members that follow.
        self.offset_data = archive.fileobj.tell()
        buf = archive.fileobj.read(self._block(self.size))
        if len(buf) < self.size:
            raise tarfile.SubsequentHeaderError("truncated pax global header")
        try:
            self.pax_headers = _pax_records(buf[: self.size], archive.errors)
        except ValueError as exc:
            raise tarfile.SubsequentHeaderError(str(exc)) from exc
        archive.offset = archive.fileobj.tell()
        return self

    @property
    def archive_format(self) -> Optional[int]:
        if self.pax_headers:
            return tarfile.PAX_FORMAT
        if self.magic == USTAR_MAGIC:
            return tarfile.USTAR_FORMAT
        if self.magic == GNU_MAGIC:
            return tarfile.GNU_FORMAT
        return None


def _gnu_time(field: bytes) -> Optional[int]:
    if not field or field[:1] == b"\0":
        return None
    try:
        return tarfile.nti(field)
    except tarfile.InvalidHeaderError:
        return None


def _pax_records(buf: bytes, errors: str) -> Dict[str, str]:
    """Parse the "<len> <keyword>=<value>" records of a pax header payload."""
    records: Dict[str, str] = {}
    pos = 0
    while pos < len(buf) and buf[pos] != 0:
        space = buf.find(b" ", pos)
        if space < 0:
            raise ValueError("invalid pax record")
        length = int(buf[pos:space])
        end = pos + length
        if length < 5 or space >= end or end > len(buf) or buf[end - 1] != 0x0A:
            raise ValueError("invalid pax record")
        keyword, eq, value = buf[space + 1 : end - 1].partition(b"=")
        if not keyword or not eq:
            raise ValueError("invalid pax record")
        records[keyword.decode(NAME_ENCODING, errors)] = value.decode(NAME_ENCODING, errors)
        pos = end
    return records


def open_archive(stream: BinaryIO) -> tarfile.TarFile:
    """Open ``stream`` as a forward-only tar archive; compressed input is detected."""
    return tarfile.open(
        fileobj=open_input(stream),
        mode="r|*",
        bufsize=STREAM_BUFSIZE,
        tarinfo=HeaderInfo,
        encoding=NAME_ENCODING,
        errors=NAME_ERRORS,
    )


def stream_headers(tar: tarfile.TarFile) -> Iterator[HeaderResult]:
    """Yield ``(record, None)`` per archive entry, in archive order.

    A decode or normalization failure is yielded once as ``(None, error)`` and
    ends the sequence; end of archive ends it without an error element.
    """
    while True:
        try:
            tarinfo = tar.next()
        except DECODE_ERRORS as exc:
            err = UnderlyingDecodeError(f"read tar header: {exc}")
            err.__cause__ = exc
            yield None, err
            return
        if tarinfo is None:
            return
        # Only one entry is needed at a time; drop the member cache.
        tar.members = []
        try:
            record = normalize(tarinfo)
        except UnknownEntryTypeError as exc:
            yield None, exc
            return
        yield record, None


def read_headers(stream: BinaryIO) -> Iterator[HeaderResult]:
    """Open ``stream`` lazily and stream its headers, errors included."""
    try:
        tar = open_archive(stream)
    except DECODE_ERRORS as exc:
        err = UnderlyingDecodeError(f"open tar stream: {exc}")
        err.__cause__ = exc
        yield None, err
        return
    yield from stream_headers(tar)
