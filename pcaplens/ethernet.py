from __future__ import annotations

from .capture import RawRecord
from .cursor import big_endian
from .errors import RecordDecodeError
from .models import EthernetRecord
from .protocols import resolve_ethertype
from .utils import format_mac


ETHERNET_HEADER_LEN = 14


def decode_ethernet(raw: RawRecord) -> EthernetRecord:
    """Decode the Ethernet II header at the start of a record payload."""
    data = raw.data
    if len(data) < ETHERNET_HEADER_LEN:
        raise RecordDecodeError(
            f"record {raw.index}: {len(data)} bytes is too short for an Ethernet header"
        )
    ethertype = big_endian(data, offset=12).u16()
    return EthernetRecord(
        index=raw.index,
        ethertype=ethertype,
        ethertype_label=resolve_ethertype(ethertype),
        source=format_mac(data[6:12]),
        destination=format_mac(data[0:6]),
        ts_sec=raw.ts_sec,
        ts_usec=raw.ts_usec,
    )


def ethernet_payload(raw: RawRecord) -> bytes:
    return raw.data[ETHERNET_HEADER_LEN:]
