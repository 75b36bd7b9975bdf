from __future__ import annotations

from pcaplens.ips import ethertype_distribution, ip_distribution, protocol_distribution, top_entries
from pcaplens.models import EthernetRecord, IPv4Record
from pcaplens.protocols import resolve_ethertype, resolve_protocol


def _ip(src: str, dst: str, protocol: int = 6, index: int = 0) -> IPv4Record:
    return IPv4Record(
        index=index,
        source_ip=src,
        dest_ip=dst,
        protocol=protocol,
        protocol_label=resolve_protocol(protocol),
        ttl=64,
        total_length=40,
        header_length=20,
        ts_sec=0,
        ts_usec=0,
    )


def _eth(ethertype: int, index: int = 0) -> EthernetRecord:
    return EthernetRecord(
        index=index,
        ethertype=ethertype,
        ethertype_label=resolve_ethertype(ethertype),
        source="bb:bb:bb:bb:bb:bb",
        destination="aa:aa:aa:aa:aa:aa",
        ts_sec=0,
        ts_usec=0,
    )


def test_empty_input_has_empty_distributions() -> None:
    distribution = ip_distribution([])
    assert distribution.total == 0
    assert distribution.sources == []
    assert distribution.destinations == []
    assert protocol_distribution([]) == []
    assert ethertype_distribution([]) == []


def test_counts_and_percentages() -> None:
    records = [
        _ip("10.0.0.1", "10.0.0.9"),
        _ip("10.0.0.2", "10.0.0.9"),
        _ip("10.0.0.1", "10.0.0.8"),
    ]
    distribution = ip_distribution(records)
    assert distribution.total == 3
    assert [(e.ip, e.count, e.percentage) for e in distribution.sources] == [
        ("10.0.0.1", 2, 66.67),
        ("10.0.0.2", 1, 33.33),
    ]
    assert [(e.ip, e.count, e.percentage) for e in distribution.destinations] == [
        ("10.0.0.9", 2, 66.67),
        ("10.0.0.8", 1, 33.33),
    ]


def test_ties_keep_first_appearance_order() -> None:
    records = [_ip("c", "x"), _ip("a", "x"), _ip("b", "x"), _ip("a", "x"), _ip("c", "x")]
    assert [e.ip for e in ip_distribution(records).sources] == ["c", "a", "b"]


def test_counts_sum_to_total_and_percentages_to_100() -> None:
    sources = [f"192.168.0.{i % 7}" for i in range(101)]
    records = [_ip(src, "10.0.0.1") for src in sources]
    distribution = ip_distribution(records)
    assert sum(e.count for e in distribution.sources) == len(records)
    assert abs(sum(e.percentage for e in distribution.sources) - 100) <= 0.1
    assert distribution.destinations[0].percentage == 100.0


def test_accepts_generators() -> None:
    distribution = ip_distribution(_ip("1.1.1.1", "2.2.2.2") for _ in range(4))
    assert distribution.total == 4
    assert distribution.sources[0].count == 4


def test_protocol_and_ethertype_breakdowns() -> None:
    records = [_ip("a", "b", 6), _ip("a", "b", 17), _ip("a", "b", 6), _ip("a", "b", 250)]
    assert [(c.label, c.count) for c in protocol_distribution(records)] == [
        ("TCP", 2),
        ("UDP", 1),
        ("unknown(250)", 1),
    ]
    frames = [_eth(0x0800), _eth(0x0806), _eth(0x0800), _eth(0x0800)]
    breakdown = ethertype_distribution(frames)
    assert [(c.label, c.count, c.percentage) for c in breakdown] == [("IPv4", 3, 75.0), ("ARP", 1, 25.0)]


def test_top_entries_limits() -> None:
    assert top_entries([1, 2, 3], 2) == [1, 2]
    assert top_entries([1, 2, 3], 0) == [1, 2, 3]


def test_to_dict_shape() -> None:
    payload = ip_distribution([_ip("10.0.0.1", "10.0.0.2")]).to_dict()
    assert payload == {
        "total": 1,
        "sources": [{"ip": "10.0.0.1", "count": 1, "percentage": 100.0}],
        "destinations": [{"ip": "10.0.0.2", "count": 1, "percentage": 100.0}],
    }


def test_all_tied_entries_follow_input_order() -> None:
    records = [_ip(src, "x") for src in ("10.0.0.9", "10.0.0.3", "10.0.0.7")]
    assert [e.ip for e in ip_distribution(records).sources] == ["10.0.0.9", "10.0.0.3", "10.0.0.7"]
