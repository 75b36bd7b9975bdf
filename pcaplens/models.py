from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EthernetRecord:
    index: int
    ethertype: int
    ethertype_label: str
    source: str
    destination: str
    ts_sec: int
    ts_usec: int

    def to_dict(self) -> dict[str, object]:
        return {
            "ethType": self.ethertype_label,
            "ethTypeCode": self.ethertype,
            "source": self.source,
            "target": self.destination,
            "tsSec": self.ts_sec,
            "tsUsec": self.ts_usec,
        }


@dataclass(frozen=True)
class IPv4Record:
    index: int
    source_ip: str
    dest_ip: str
    protocol: int
    protocol_label: str
    ttl: int
    total_length: int
    header_length: int
    ts_sec: int
    ts_usec: int

    def to_dict(self) -> dict[str, object]:
        return {
            "sourceIp": self.source_ip,
            "destIp": self.dest_ip,
            "protocol": self.protocol,
            "protocolLabel": self.protocol_label,
            "ttl": self.ttl,
            "totalLength": self.total_length,
            "tsSec": self.ts_sec,
            "tsUsec": self.ts_usec,
        }


@dataclass(frozen=True)
class IpDistributionEntry:
    ip: str
    count: int
    percentage: float

    def to_dict(self) -> dict[str, object]:
        return {"ip": self.ip, "count": self.count, "percentage": self.percentage}


@dataclass(frozen=True)
class IpDistribution:
    total: int
    sources: list[IpDistributionEntry] = field(default_factory=list)
    destinations: list[IpDistributionEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "sources": [entry.to_dict() for entry in self.sources],
            "destinations": [entry.to_dict() for entry in self.destinations],
        }


@dataclass(frozen=True)
class LabelCount:
    label: str
    count: int
    percentage: float

    def to_dict(self) -> dict[str, object]:
        return {"label": self.label, "count": self.count, "percentage": self.percentage}
