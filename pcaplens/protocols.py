from __future__ import annotations


ETHERTYPE_IPV4 = 0x0800

ETHERTYPE_LABELS = {
    0x0800: "IPv4",
    0x0806: "ARP",
    0x8100: "VLAN",
    0x86DD: "IPv6",
}

IP_PROTOCOL_LABELS = {
    1: "ICMP",
    2: "IGMP",
    6: "TCP",
    17: "UDP",
    89: "OSPF",
}


def _unknown(code: int) -> str:
    return f"unknown({code})"


def resolve_ethertype(code: int) -> str:
    return ETHERTYPE_LABELS.get(code, _unknown(code))


def resolve_protocol(number: int) -> str:
    return IP_PROTOCOL_LABELS.get(number, _unknown(number))
