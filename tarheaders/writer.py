from __future__ import annotations

import json
import threading
from typing import BinaryIO, Iterable, Optional

from .errors import CancellationError, SerializationError, WriteError
from .reader import HeaderResult
from .records import HeaderRecord


def encode_record(record: HeaderRecord) -> bytes:
    """Serialize one record as a UTF-8 JSON line (without the newline)."""
    try:
        return json.dumps(record.as_dict(), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        # UnicodeEncodeError (lone surrogates in names) is a ValueError
        raise SerializationError(f"encode header {record.name!r}: {exc}") from exc


def drain(
    headers: Iterable[HeaderResult],
    out: BinaryIO,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Write each streamed header to ``out`` as one JSON line.

    ``cancel`` is polled before every pull, so entries after a cancellation are
    never decoded. The first error ends the run; lines already written stay.

    Returns:
        Number of records written.

    Raises:
        CancellationError: ``cancel`` was set.
        SerializationError: a record could not be encoded.
        WriteError: ``out`` failed.
        TarHeadersError: the error element yielded by ``headers``.
    """
    written = 0
    it = iter(headers)
    while True:
        if cancel is not None and cancel.is_set():
            raise CancellationError(f"cancelled after {written} record(s)")
        try:
            record, err = next(it)
        except StopIteration:
            break
        if err is not None:
            raise err
        line = encode_record(record)
        try:
            out.write(line + b"\n")
        except OSError as exc:
            raise WriteError(f"write header {record.name!r}: {exc}") from exc
        written += 1
    try:
        out.flush()
    except OSError as exc:
        raise WriteError(f"flush output: {exc}") from exc
    return written
