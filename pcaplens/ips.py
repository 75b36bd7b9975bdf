from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable, Sequence, TypeVar

from .models import EthernetRecord, IPv4Record, IpDistribution, IpDistributionEntry, LabelCount


_R = TypeVar("_R")


def _percentage(count: int, total: int) -> float:
    return round(count / total * 100, 2)


def _ranked_counts(records: Iterable[_R], key: Callable[[_R], str]) -> list[tuple[str, int]]:
    # most_common() is a stable sort over insertion order, so ties keep first appearance.
    return Counter(key(record) for record in records).most_common()


def _ip_entries(records: Sequence[IPv4Record], key: Callable[[IPv4Record], str]) -> list[IpDistributionEntry]:
    total = len(records)
    return [
        IpDistributionEntry(ip=ip, count=count, percentage=_percentage(count, total))
        for ip, count in _ranked_counts(records, key)
    ]


def ip_distribution(records: Iterable[IPv4Record]) -> IpDistribution:
    """Source and destination address frequencies over a record sequence."""
    items = list(records)
    if not items:
        return IpDistribution(total=0)
    return IpDistribution(
        total=len(items),
        sources=_ip_entries(items, lambda record: record.source_ip),
        destinations=_ip_entries(items, lambda record: record.dest_ip),
    )


def _label_counts(records: Sequence[_R], key: Callable[[_R], str]) -> list[LabelCount]:
    total = len(records)
    if not total:
        return []
    return [
        LabelCount(label=label, count=count, percentage=_percentage(count, total))
        for label, count in _ranked_counts(records, key)
    ]


def ethertype_distribution(records: Iterable[EthernetRecord]) -> list[LabelCount]:
    return _label_counts(list(records), lambda record: record.ethertype_label)


def protocol_distribution(records: Iterable[IPv4Record]) -> list[LabelCount]:
    return _label_counts(list(records), lambda record: record.protocol_label)


def top_entries(entries: Sequence[_R], limit: int) -> list[_R]:
    if limit <= 0:
        return list(entries)
    return list(entries[:limit])
