from __future__ import annotations

from dataclasses import dataclass
import logging
import mmap
import os
from pathlib import Path
from typing import Iterator, Optional

from .cursor import Buffer, ByteCursor
from .errors import CaptureIOError, FormatError, TruncatedRecordError
from .utils import PCAPNG_MAGIC


logger = logging.getLogger(__name__)

GLOBAL_HEADER_LEN = 24
RECORD_HEADER_LEN = 16
SUPPORTED_VERSION_MAJOR = 2
LINKTYPE_ETHERNET = 1

# Magic read little-endian -> byte order of every other field in the file.
PCAP_MAGIC = {
    0xA1B2C3D4: "<",
    0xD4C3B2A1: ">",
}


@dataclass(frozen=True)
class CaptureHeader:
    magic: int
    byte_order: str
    version_major: int
    version_minor: int
    thiszone: int
    sigfigs: int
    snaplen: int
    linktype: int

    @property
    def big_endian(self) -> bool:
        return self.byte_order == ">"


@dataclass(frozen=True)
class RawRecord:
    index: int
    offset: int
    ts_sec: int
    ts_usec: int
    incl_len: int
    orig_len: int
    data: bytes


def parse_header(buffer: Buffer) -> CaptureHeader:
    head = bytes(buffer[:GLOBAL_HEADER_LEN])
    if head[:4] == PCAPNG_MAGIC:
        raise FormatError("pcapng captures are not supported; convert to classic pcap first")
    if len(head) < GLOBAL_HEADER_LEN:
        raise FormatError(f"global header needs {GLOBAL_HEADER_LEN} bytes, file has {len(head)}")

    magic = ByteCursor(head, "<").u32()
    byte_order = PCAP_MAGIC.get(magic)
    if byte_order is None:
        raise FormatError(f"bad magic number 0x{magic:08x}")

    cursor = ByteCursor(head, byte_order, offset=4)
    header = CaptureHeader(
        magic=magic,
        byte_order=byte_order,
        version_major=cursor.u16(),
        version_minor=cursor.u16(),
        thiszone=cursor.i32(),
        sigfigs=cursor.u32(),
        snaplen=cursor.u32(),
        linktype=cursor.u32(),
    )
    if header.version_major != SUPPORTED_VERSION_MAJOR:
        raise FormatError(f"unsupported pcap version {header.version_major}.{header.version_minor}")
    return header


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise CaptureIOError(f"cannot read capture {path}: {exc}") from exc


def _map_file(path: Path) -> Optional[mmap.mmap]:
    try:
        with path.open("rb") as handle:
            if os.fstat(handle.fileno()).st_size == 0:
                return None
            return mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
    except OSError as exc:
        raise CaptureIOError(f"cannot map capture {path}: {exc}") from exc


class CaptureReader:
    """Classic pcap container reader.

    The global header is validated on construction. Iterating yields
    ``RawRecord`` objects lazily, always starting from the first record, so a
    reader can be walked several times or abandoned part way. Per-record
    problems never raise out of iteration: they end up in ``warnings`` and,
    for short trailing data, set ``truncated``.
    """

    def __init__(self, buffer: Buffer, path: Optional[Path] = None, _mapping: Optional[mmap.mmap] = None) -> None:
        self.path = path
        self._buffer = buffer
        self._mapping = _mapping
        self.warnings: list[str] = []
        self.truncated = False
        try:
            self.header = parse_header(self._buffer)
        except FormatError:
            self.close()
            raise
        if self.header.linktype != LINKTYPE_ETHERNET:
            self._warn(f"linktype {self.header.linktype} is not Ethernet; frames decoded as Ethernet anyway")

    @classmethod
    def open(cls, path: Path | str, use_mmap: bool = False) -> "CaptureReader":
        path = Path(path)
        if use_mmap:
            mapping = _map_file(path)
            return cls(mapping if mapping is not None else b"", path=path, _mapping=mapping)
        return cls(_read_file(path), path=path)

    def __enter__(self) -> "CaptureReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._mapping is None:
            return
        self._mapping.close()
        self._mapping = None

    @property
    def size_bytes(self) -> int:
        return len(self._buffer)

    def _warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)
        logger.warning("%s: %s", self.path.name if self.path else "<buffer>", message)

    def __iter__(self) -> Iterator[RawRecord]:
        self.truncated = False
        return self._records()

    def _records(self) -> Iterator[RawRecord]:
        cursor = ByteCursor(self._buffer, self.header.byte_order, offset=GLOBAL_HEADER_LEN)
        snaplen = self.header.snaplen
        index = 0
        while not cursor.at_end():
            offset = cursor.offset
            available = cursor.remaining
            try:
                ts_sec = cursor.u32()
                ts_usec = cursor.u32()
                incl_len = cursor.u32()
                orig_len = cursor.u32()
            except TruncatedRecordError:
                self.truncated = True
                self._warn(f"record {index} header truncated at offset {offset} ({available} of {RECORD_HEADER_LEN} bytes)")
                return

            if snaplen and incl_len > snaplen:
                if incl_len > cursor.remaining:
                    self._warn(f"record {index} at offset {offset}: captured length {incl_len} exceeds snaplen {snaplen} and the file; stopping")
                    return
                self._warn(f"record {index} at offset {offset}: captured length {incl_len} exceeds snaplen {snaplen}; skipped")
                cursor.skip(incl_len)
                index += 1
                continue

            try:
                data = cursor.read(incl_len)
            except TruncatedRecordError as exc:
                self.truncated = True
                self._warn(f"record {index} payload truncated at offset {offset} ({exc.available} of {incl_len} bytes)")
                return

            yield RawRecord(
                index=index,
                offset=offset,
                ts_sec=ts_sec,
                ts_usec=ts_usec,
                incl_len=incl_len,
                orig_len=orig_len,
                data=data,
            )
            index += 1


def read_records(path: Path | str, use_mmap: bool = False) -> tuple[CaptureHeader, list[RawRecord]]:
    with CaptureReader.open(path, use_mmap=use_mmap) as reader:
        return reader.header, list(reader)
