from __future__ import annotations

import posixpath
import stat
import tarfile
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .errors import UnknownEntryTypeError
from .registry import ArchiveFormat, EntryType, lookup_entry_type, lookup_format


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Serialized in place of a timestamp the archive does not record
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

# Entry types whose kind overrides any file type bits embedded in the mode
_FILE_TYPE_BITS = {
    EntryType.SYMBOLIC_LINK: stat.S_IFLNK,
    EntryType.CHAR_DEVICE: stat.S_IFCHR,
    EntryType.BLOCK_DEVICE: stat.S_IFBLK,
    EntryType.DIRECTORY: stat.S_IFDIR,
    EntryType.FIFO: stat.S_IFIFO,
}


@dataclass(frozen=True)
class HeaderRecord:
    entry_type: EntryType
    entry_type_label: str

    name: str
    link_name: str
    basename: str
    hidden: bool

    size: int
    mode: int
    uid: int
    gid: int
    uname: str
    gname: str

    file_mode: int
    file_mode_string: str

    mod_time: Optional[datetime]
    access_time: Optional[datetime]
    change_time: Optional[datetime]

    dev_major: int
    dev_minor: int

    pax_records: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), hash=False)

    archive_format: ArchiveFormat = ArchiveFormat.UNKNOWN

    def as_dict(self) -> Dict[str, Any]:
        """Return the record keyed by its stable output field names."""
        return {
            "type_flag": self.entry_type.code,
            "type_string": self.entry_type_label,
            "name": self.name,
            "link_name": self.link_name,
            "basename": self.basename,
            "hidden": self.hidden,
            "size": self.size,
            "mode": self.mode,
            "uid": self.uid,
            "gid": self.gid,
            "uname": self.uname,
            "gname": self.gname,
            "file_mode": self.file_mode,
            "file_mode_string": self.file_mode_string,
            "mod_time": _isoformat(self.mod_time),
            "access_time": _isoformat(self.access_time),
            "change_time": _isoformat(self.change_time),
            "dev_major": self.dev_major,
            "dev_minor": self.dev_minor,
            "pax_records": dict(self.pax_records),
            "format": self.archive_format.label,
        }


def file_mode_bits(entry_type: EntryType, mode: int) -> int:
    """Combine tar permission bits and the entry kind into a POSIX st_mode value.

    Permission, setuid, setgid and sticky bits are taken from ``mode``. Links,
    devices, directories and fifos take their file type from the entry type;
    everything else keeps a file type embedded in ``mode`` (e.g. sockets) or
    falls back to a regular file.
    """
    fmt = _FILE_TYPE_BITS.get(entry_type)
    if fmt is None:
        fmt = stat.S_IFMT(mode) or stat.S_IFREG
    return fmt | stat.S_IMODE(mode)


def entry_basename(name: str) -> str:
    stripped = name.rstrip("/")
    if name and not stripped:
        return "/"
    return posixpath.basename(stripped)


def normalize(tarinfo: tarfile.TarInfo) -> HeaderRecord:
    """Convert one decoded tar header into a HeaderRecord.

    Raises:
        UnknownEntryTypeError: the header's type code is not a known entry type.
    """
    entry_type = lookup_entry_type(tarinfo.type)
    if entry_type is None:
        raise UnknownEntryTypeError(tarinfo.type)

    fmode = file_mode_bits(entry_type, tarinfo.mode)
    basename = entry_basename(tarinfo.name)
    pax = dict(tarinfo.pax_headers or {})

    access_time = _pax_time(pax.get("atime"))
    if access_time is None:
        access_time = _timestamp(getattr(tarinfo, "gnu_atime", None))
    change_time = _pax_time(pax.get("ctime"))
    if change_time is None:
        change_time = _timestamp(getattr(tarinfo, "gnu_ctime", None))

    return HeaderRecord(
        entry_type=entry_type,
        entry_type_label=entry_type.label,
        name=tarinfo.name,
        link_name=tarinfo.linkname,
        basename=basename,
        hidden=basename.startswith("."),
        size=tarinfo.size,
        mode=tarinfo.mode,
        uid=tarinfo.uid,
        gid=tarinfo.gid,
        uname=tarinfo.uname,
        gname=tarinfo.gname,
        file_mode=fmode,
        file_mode_string=stat.filemode(fmode),
        mod_time=_timestamp(tarinfo.mtime),
        access_time=access_time,
        change_time=change_time,
        dev_major=tarinfo.devmajor,
        dev_minor=tarinfo.devminor,
        pax_records=MappingProxyType(pax),
        archive_format=lookup_format(getattr(tarinfo, "archive_format", None)),
    )


def _timestamp(value: Optional[float]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return _EPOCH + timedelta(seconds=value)
    except (OverflowError, ValueError, TypeError):
        # Outside the range datetime can represent
        return None


def _pax_time(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return _timestamp(seconds)


def _isoformat(value: Optional[datetime]) -> str:
    if value is None:
        value = ZERO_TIME
    return value.isoformat().replace("+00:00", "Z")
