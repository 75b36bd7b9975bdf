from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Iterator, Optional

from .capture import CaptureHeader, CaptureReader, RawRecord
from .errors import RecordDecodeError
from .ethernet import decode_ethernet, ethernet_payload
from .ipv4 import decode_ipv4
from .models import EthernetRecord, IPv4Record
from .protocols import ETHERTYPE_IPV4


logger = logging.getLogger(__name__)


@dataclass
class CaptureAnalysis:
    path: Path
    header: CaptureHeader
    size_bytes: int = 0
    record_count: int = 0
    truncated: bool = False
    ethernet: list[EthernetRecord] = field(default_factory=list)
    ipv4: list[IPv4Record] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def first_ts(self) -> Optional[tuple[int, int]]:
        if not self.ethernet:
            return None
        return min((rec.ts_sec, rec.ts_usec) for rec in self.ethernet)

    @property
    def last_ts(self) -> Optional[tuple[int, int]]:
        if not self.ethernet:
            return None
        return max((rec.ts_sec, rec.ts_usec) for rec in self.ethernet)


def decode_record(raw: RawRecord) -> tuple[EthernetRecord, Optional[IPv4Record]]:
    """Decode one raw record to its Ethernet view and, for IPv4 frames, its IPv4 view.

    An undecodable Ethernet header raises ``RecordDecodeError``; a bad IPv4
    header does too, so callers that want to keep the Ethernet record should
    use ``iter_decoded``.
    """
    eth = decode_ethernet(raw)
    if eth.ethertype != ETHERTYPE_IPV4:
        return eth, None
    return eth, decode_ipv4(eth, ethernet_payload(raw))


def iter_decoded(
    reader: CaptureReader,
    warnings: Optional[list[str]] = None,
) -> Iterator[tuple[RawRecord, Optional[EthernetRecord], Optional[IPv4Record]]]:
    for raw in reader:
        try:
            eth = decode_ethernet(raw)
        except RecordDecodeError as exc:
            _record_warning(warnings, exc)
            yield raw, None, None
            continue

        ip_record: Optional[IPv4Record] = None
        if eth.ethertype == ETHERTYPE_IPV4:
            try:
                ip_record = decode_ipv4(eth, ethernet_payload(raw))
            except RecordDecodeError as exc:
                _record_warning(warnings, exc)
        yield raw, eth, ip_record


def _record_warning(warnings: Optional[list[str]], exc: RecordDecodeError) -> None:
    logger.debug("skipping record: %s", exc)
    if warnings is not None:
        warnings.append(str(exc))


def analyze_capture(path: Path | str, use_mmap: bool = False) -> CaptureAnalysis:
    """Parse a capture once and return both record sequences.

    Raises ``CaptureIOError`` for unreadable files and ``FormatError`` for a
    bad global header. Anything wrong past the header is reported through
    ``warnings`` instead.
    """
    path = Path(path)
    with CaptureReader.open(path, use_mmap=use_mmap) as reader:
        analysis = CaptureAnalysis(path=path, header=reader.header, size_bytes=reader.size_bytes)
        decode_warnings: list[str] = []
        for _raw, eth, ip_record in iter_decoded(reader, decode_warnings):
            analysis.record_count += 1
            if eth is not None:
                analysis.ethernet.append(eth)
            if ip_record is not None:
                analysis.ipv4.append(ip_record)
        analysis.truncated = reader.truncated
        analysis.warnings = list(reader.warnings) + decode_warnings

    logger.info(
        "%s: %d records, %d ethernet, %d ipv4, %d warnings",
        path.name,
        analysis.record_count,
        len(analysis.ethernet),
        len(analysis.ipv4),
        len(analysis.warnings),
    )
    return analysis


def analyze_pcap(path: Path | str, use_mmap: bool = False) -> list[EthernetRecord]:
    return analyze_capture(path, use_mmap=use_mmap).ethernet


def analyze_ipv4_packets(path: Path | str, use_mmap: bool = False) -> list[IPv4Record]:
    return analyze_capture(path, use_mmap=use_mmap).ipv4
