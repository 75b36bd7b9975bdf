from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from .analyzer import CaptureAnalysis
from .coloring import header, label, style, styled_warning
from .filters import Direction, FilterCriteria
from .ips import ethertype_distribution, ip_distribution, protocol_distribution, top_entries
from .models import EthernetRecord, IPv4Record, IpDistributionEntry, LabelCount
from .utils import format_bytes_as_mb, format_ms, format_ts


SECTION_BAR = "=" * 72
SUBSECTION_BAR = "-" * 72

_COMMON_LINKTYPES = {
    0: "Null/Loopback",
    1: "Ethernet",
    101: "Raw IP",
    105: "IEEE 802.11",
    113: "Linux cooked capture",
}


def _format_linktype(value: Optional[int]) -> str:
    if value is None:
        return "-"
    if value in _COMMON_LINKTYPES:
        return _COMMON_LINKTYPES[value]
    try:
        from scapy.config import conf
        import scapy.layers.all  # noqa: F401  registers layer classes in conf.l2types
    except ImportError:
        return f"LINKTYPE_{value}"
    mapped = conf.l2types.get(value)
    if mapped is not None:
        return getattr(mapped, "__name__", str(mapped))
    return f"LINKTYPE_{value}"


def _format_kv(label_text: str, value: str, width: int = 24) -> str:
    return f"{label(label_text):<{width}}: {value}"


def _format_table(rows: Iterable[list[str]]) -> str:
    rows = list(rows)
    if len(rows) <= 1:
        return "(none)"

    def _visible_len(text: str) -> int:
        return len(re.sub(r"\x1b\[[0-9;]*m", "", text))

    widths = [max(_visible_len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        parts = []
        for idx, value in enumerate(row):
            pad = widths[idx] - _visible_len(value)
            parts.append(value + (" " * max(0, pad)))
        lines.append("  ".join(parts).rstrip())
    return "\n".join(lines)


def _label_rows(title: str, entries: Sequence[LabelCount], limit: int) -> list[list[str]]:
    rows = [[title, "Packets", "% packets"]]
    for entry in top_entries(entries, limit):
        rows.append([entry.label, str(entry.count), f"{entry.percentage:.2f}%"])
    return rows


def _ip_rows(title: str, entries: Sequence[IpDistributionEntry], limit: int) -> list[list[str]]:
    rows = [[title, "Packets", "% packets"]]
    for entry in top_entries(entries, limit):
        rows.append([entry.ip, str(entry.count), f"{entry.percentage:.2f}%"])
    return rows


def _describe_filter(criteria: FilterCriteria) -> str:
    parts = []
    if criteria.start_ms is not None:
        parts.append(f"from {format_ms(criteria.start_ms)}")
    if criteria.end_ms is not None:
        parts.append(f"to {format_ms(criteria.end_ms)}")
    if criteria.ip_address:
        direction = criteria.direction.value if isinstance(criteria.direction, Direction) else str(criteria.direction)
        parts.append(f"ip {criteria.ip_address} ({direction})")
    return ", ".join(parts) if parts else "none"


def render_summary(analysis: CaptureAnalysis, limit: int = 12) -> str:
    capture_header = analysis.header
    lines: list[str] = []
    lines.append(SECTION_BAR)
    lines.append(header(f"CAPTURE SUMMARY :: {analysis.path.name}"))
    lines.append(SECTION_BAR)
    lines.append(_format_kv("File Size", format_bytes_as_mb(analysis.size_bytes)))
    lines.append(_format_kv("Format", f"pcap {capture_header.version_major}.{capture_header.version_minor}"))
    lines.append(_format_kv("Byte Order", "big-endian" if capture_header.big_endian else "little-endian"))
    lines.append(_format_kv("Link Type", _format_linktype(capture_header.linktype)))
    lines.append(_format_kv("Snaplen", str(capture_header.snaplen)))
    lines.append(_format_kv("Records", str(analysis.record_count)))
    lines.append(_format_kv("Ethernet Frames", str(len(analysis.ethernet))))
    lines.append(_format_kv("IPv4 Packets", str(len(analysis.ipv4))))
    first = analysis.first_ts
    last = analysis.last_ts
    lines.append(_format_kv("Start", format_ts(*first) if first else "-"))
    lines.append(_format_kv("End", format_ts(*last) if last else "-"))
    if analysis.truncated:
        lines.append(_format_kv("Truncated", style("yes, trailing record incomplete", "alert")))

    if analysis.warnings:
        lines.append(SUBSECTION_BAR)
        lines.append(header("Warnings"))
        for message in analysis.warnings[:limit] if limit else analysis.warnings:
            lines.append(styled_warning(message))
        hidden = len(analysis.warnings) - limit
        if limit and hidden > 0:
            lines.append(f"  ... {hidden} more")

    lines.append(SUBSECTION_BAR)
    lines.append(header("EtherType Breakdown"))
    lines.append(_format_table(_label_rows("EtherType", ethertype_distribution(analysis.ethernet), limit)))
    return "\n".join(lines)


def render_ethernet_records(records: Sequence[EthernetRecord], limit: int = 12) -> str:
    lines = [SUBSECTION_BAR, header(f"Ethernet Frames ({len(records)})")]
    rows = [["#", "Time", "Source", "Destination", "EtherType"]]
    for record in top_entries(records, limit):
        rows.append([
            str(record.index),
            format_ts(record.ts_sec, record.ts_usec),
            record.source,
            record.destination,
            record.ethertype_label,
        ])
    lines.append(_format_table(rows))
    return "\n".join(lines)


def render_ipv4_records(
    records: Sequence[IPv4Record],
    limit: int = 12,
    criteria: Optional[FilterCriteria] = None,
) -> str:
    lines = [SUBSECTION_BAR, header(f"IPv4 Packets ({len(records)})")]
    if criteria is not None:
        lines.append(_format_kv("Filter", _describe_filter(criteria)))
    rows = [["#", "Time", "Source", "Destination", "Protocol", "TTL", "Length"]]
    for record in top_entries(records, limit):
        rows.append([
            str(record.index),
            format_ts(record.ts_sec, record.ts_usec),
            record.source_ip,
            record.dest_ip,
            record.protocol_label,
            str(record.ttl),
            str(record.total_length),
        ])
    lines.append(_format_table(rows))
    return "\n".join(lines)


def render_ip_stats(records: Sequence[IPv4Record], limit: int = 12) -> str:
    distribution = ip_distribution(records)
    lines = [SUBSECTION_BAR, header("IP Protocol Utilization")]
    lines.append(_format_table(_label_rows("Protocol", protocol_distribution(records), limit)))
    lines.append(SUBSECTION_BAR)
    lines.append(header("Top Sources"))
    lines.append(_format_table(_ip_rows("Source", distribution.sources, limit)))
    lines.append(SUBSECTION_BAR)
    lines.append(header("Top Destinations"))
    lines.append(_format_table(_ip_rows("Destination", distribution.destinations, limit)))
    return "\n".join(lines)
