"""pcaplens: classic pcap decoding into Ethernet and IPv4 records."""

from __future__ import annotations

from .analyzer import CaptureAnalysis, analyze_capture, analyze_ipv4_packets, analyze_pcap
from .errors import CaptureIOError, FormatError, PcapError, RecordDecodeError, TruncatedRecordError
from .filters import Direction, FilterCriteria, filter_records
from .ips import ip_distribution

__all__ = [
    "__version__",
    "CaptureAnalysis",
    "CaptureIOError",
    "Direction",
    "FilterCriteria",
    "FormatError",
    "PcapError",
    "RecordDecodeError",
    "TruncatedRecordError",
    "analyze_capture",
    "analyze_ipv4_packets",
    "analyze_pcap",
    "filter_records",
    "ip_distribution",
]
__version__ = "0.3.0"
