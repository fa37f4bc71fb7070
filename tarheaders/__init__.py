"""
tarheaders — tar archive metadata as JSON lines.

Reads a tar stream (plain, gzip, bzip2, xz or zstd) entry by entry and emits one
normalized header record per entry without extracting payloads:

- Closed registries for entry types and archive formats (tarheaders.registry)
- Immutable HeaderRecord with derived basename, hidden flag and ls-style mode
- Lazy (record, error) stream over tarfile's forward-only reader
- JSON-lines sink that stops at the first error or on cancellation
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "registry",
    "records",
    "reader",
    "writer",
    "errors",
]

# Programmatic entry point: tarheaders.cli.cmd_headers(stream, out, cancel=...)
