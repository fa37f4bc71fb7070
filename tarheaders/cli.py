from __future__ import annotations

import argparse
import signal
import sys
import threading
from typing import BinaryIO, List, Optional

from tarheaders.errors import CancellationError, TarHeadersError
from tarheaders.reader import read_headers
from tarheaders.writer import drain


def cmd_headers(stream: BinaryIO, out: BinaryIO, *, cancel: Optional[threading.Event] = None) -> int:
    """Write one JSON line per entry of the tar archive read from ``stream``.

    Args:
        stream: Binary stream holding a (possibly compressed) tar archive.
        out: Binary sink for the JSON lines.
        cancel: Optional event; once set, the run stops before the next entry.

    Returns:
        Number of records written.
    """
    return drain(read_headers(stream), out, cancel)


def _install_cancel_handlers(cancel: threading.Event):
    """Route SIGINT/SIGTERM to ``cancel``; returns the handlers to restore."""
    previous = {}

    def _handler(signum, frame):
        cancel.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[signum] = signal.signal(signum, _handler)
        except ValueError:
            # Not the main thread; keep default signal behaviour
            continue
    return previous


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="tarheaders",
        description="Read a tar archive from stdin and write one JSON document per entry header to stdout",
        epilog="gzip, bzip2, xz and zstd compressed archives are detected automatically.",
    )
    ap.parse_args(argv)

    cancel = threading.Event()
    previous = _install_cancel_handlers(cancel)
    try:
        cmd_headers(sys.stdin.buffer, sys.stdout.buffer, cancel=cancel)
    except CancellationError as e:
        print(f"Error: interrupted ({e})", file=sys.stderr)
        sys.exit(2)
    except (TarHeadersError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


if __name__ == "__main__":
    main()
