from __future__ import annotations

import enum
import tarfile
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .constants import (
    TYPE_REG,
    TYPE_REG_LEGACY,
    TYPE_LINK,
    TYPE_SYMLINK,
    TYPE_CHAR,
    TYPE_BLOCK,
    TYPE_DIR,
    TYPE_FIFO,
    TYPE_CONT,
    TYPE_XHEADER,
    TYPE_XGLOBAL,
    TYPE_GNU_SPARSE,
    TYPE_GNU_LONGNAME,
    TYPE_GNU_LONGLINK,
)


class EntryType(enum.Enum):
    """Kind of filesystem object an archive entry describes.

    Each value is the raw one-byte type code written in the tar header.
    """

    REGULAR_FILE = TYPE_REG

    # Header-only entries
    HARD_LINK = TYPE_LINK
    SYMBOLIC_LINK = TYPE_SYMLINK
    CHAR_DEVICE = TYPE_CHAR
    BLOCK_DEVICE = TYPE_BLOCK
    DIRECTORY = TYPE_DIR
    FIFO = TYPE_FIFO

    RESERVED = TYPE_CONT

    # PAX key/value records
    PAX_NON_GLOBAL_RECORD = TYPE_XHEADER
    PAX_GLOBAL_RECORD = TYPE_XGLOBAL

    # GNU extensions
    SPARSE_FILE = TYPE_GNU_SPARSE
    LONG_NAME = TYPE_GNU_LONGNAME
    LONG_LINK = TYPE_GNU_LONGLINK

    @property
    def code(self) -> str:
        return self.value.decode("ascii")

    @property
    def label(self) -> str:
        return _ENTRY_TYPE_LABELS[self]


class ArchiveFormat(enum.IntEnum):
    UNKNOWN = 0
    USTAR = 2
    PAX = 4
    GNU = 8

    @property
    def label(self) -> str:
        return _FORMAT_LABELS[self]


_ENTRY_TYPES: Mapping[bytes, EntryType] = MappingProxyType({e.value: e for e in EntryType})

# Pre-POSIX archives mark regular files with a NUL type byte
_ENTRY_TYPE_ALIASES: Mapping[bytes, bytes] = MappingProxyType({TYPE_REG_LEGACY: TYPE_REG})

_ENTRY_TYPE_LABELS: Mapping[EntryType, str] = MappingProxyType(
    {
        EntryType.REGULAR_FILE: "Regular File",
        EntryType.HARD_LINK: "Hard Link",
        EntryType.SYMBOLIC_LINK: "Symbolic Link",
        EntryType.CHAR_DEVICE: "Character Device",
        EntryType.BLOCK_DEVICE: "Block Device",
        EntryType.DIRECTORY: "Directory",
        EntryType.FIFO: "FIFO",
        EntryType.RESERVED: "(reserved)",
        EntryType.PAX_NON_GLOBAL_RECORD: "Non-global Key/Val records(PAX)",
        EntryType.PAX_GLOBAL_RECORD: "Global Key/Val records(PAX)",
        EntryType.SPARSE_FILE: "Sparse File",
        EntryType.LONG_NAME: "Long Path",
        EntryType.LONG_LINK: "Long Link Name",
    }
)

# Keyed by tarfile's format constants; V7 headers carry no format code
_FORMATS: Mapping[int, ArchiveFormat] = MappingProxyType(
    {
        tarfile.USTAR_FORMAT: ArchiveFormat.USTAR,
        tarfile.PAX_FORMAT: ArchiveFormat.PAX,
        tarfile.GNU_FORMAT: ArchiveFormat.GNU,
    }
)

_FORMAT_LABELS: Mapping[ArchiveFormat, str] = MappingProxyType(
    {
        ArchiveFormat.UNKNOWN: "Unknown",
        ArchiveFormat.USTAR: "USTAR",
        ArchiveFormat.PAX: "PAX",
        ArchiveFormat.GNU: "GNU",
    }
)


def lookup_entry_type(raw_code: Union[bytes, str]) -> Optional[EntryType]:
    """Resolve a raw header type code; returns None when the code is not registered."""
    if isinstance(raw_code, str):
        try:
            raw_code = raw_code.encode("latin-1")
        except UnicodeEncodeError:
            return None
    raw_code = _ENTRY_TYPE_ALIASES.get(raw_code, raw_code)
    return _ENTRY_TYPES.get(raw_code)


def lookup_format(raw_code: Optional[int]) -> ArchiveFormat:
    return _FORMATS.get(raw_code, ArchiveFormat.UNKNOWN)


def display_label(value: Union[EntryType, ArchiveFormat]) -> str:
    if isinstance(value, EntryType):
        return _ENTRY_TYPE_LABELS[value]
    if isinstance(value, ArchiveFormat):
        return _FORMAT_LABELS[value]
    raise TypeError(f"no display label for {type(value).__name__}")
