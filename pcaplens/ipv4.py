from __future__ import annotations

from .cursor import big_endian
from .errors import RecordDecodeError
from .models import EthernetRecord, IPv4Record
from .protocols import ETHERTYPE_IPV4, resolve_protocol
from .utils import format_ipv4


IPV4_MIN_HEADER_LEN = 20
IPV4_MIN_IHL = 5


def decode_ipv4(eth: EthernetRecord, payload: bytes) -> IPv4Record:
    """Decode the fixed IPv4 header carried by an Ethernet frame.

    ``payload`` is the frame after the 14-byte Ethernet header. Options are
    skipped and the checksum is not checked. Raises ``RecordDecodeError``
    when the frame is not IPv4, the fixed header is cut short or the
    version and IHL fields are invalid. Options that run past the captured
    bytes are skipped like any others.
    """
    if eth.ethertype != ETHERTYPE_IPV4:
        raise RecordDecodeError(f"record {eth.index}: ethertype 0x{eth.ethertype:04x} is not IPv4")
    if len(payload) < IPV4_MIN_HEADER_LEN:
        raise RecordDecodeError(f"record {eth.index}: {len(payload)} bytes is too short for an IPv4 header")

    cursor = big_endian(payload)
    version_ihl = cursor.u8()
    version = version_ihl >> 4
    ihl = version_ihl & 0x0F
    if version != 4:
        raise RecordDecodeError(f"record {eth.index}: IP version {version}, expected 4")
    if ihl < IPV4_MIN_IHL:
        raise RecordDecodeError(f"record {eth.index}: IPv4 header length {ihl} words is below {IPV4_MIN_IHL}")
    header_length = ihl * 4

    cursor.skip(1)  # type of service
    total_length = cursor.u16()
    cursor.skip(4)  # identification, flags + fragment offset
    ttl = cursor.u8()
    protocol = cursor.u8()
    cursor.skip(2)  # header checksum
    source = cursor.read(4)
    dest = cursor.read(4)

    return IPv4Record(
        index=eth.index,
        source_ip=format_ipv4(source),
        dest_ip=format_ipv4(dest),
        protocol=protocol,
        protocol_label=resolve_protocol(protocol),
        ttl=ttl,
        total_length=total_length,
        header_length=header_length,
        ts_sec=eth.ts_sec,
        ts_usec=eth.ts_usec,
    )
