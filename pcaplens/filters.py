from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from .models import IPv4Record
from .utils import parse_time_arg


class Direction(str, Enum):
    ANY = "any"
    SOURCE = "source"
    DEST = "dest"

    @classmethod
    def parse(cls, value: object) -> Union["Direction", object]:
        """Map user text onto a Direction.

        Unrecognised values come back unchanged; the IP predicate lets those
        through rather than rejecting every record.
        """
        if isinstance(value, Direction):
            return value
        if value is None:
            return cls.ANY
        text = str(value).strip().lower()
        return _DIRECTION_ALIASES.get(text, value)


_DIRECTION_ALIASES = {
    "": Direction.ANY,
    "any": Direction.ANY,
    "both": Direction.ANY,
    "source": Direction.SOURCE,
    "src": Direction.SOURCE,
    "dest": Direction.DEST,
    "dst": Direction.DEST,
    "destination": Direction.DEST,
}


@dataclass(frozen=True)
class FilterCriteria:
    start_ms: Optional[int] = None
    end_ms: Optional[int] = None
    ip_address: str = ""
    direction: object = Direction.ANY

    @classmethod
    def from_strings(
        cls,
        start: Optional[str] = None,
        end: Optional[str] = None,
        ip_address: Optional[str] = None,
        direction: Optional[str] = None,
    ) -> "FilterCriteria":
        return cls(
            start_ms=parse_time_arg(start),
            end_ms=parse_time_arg(end),
            ip_address=(ip_address or "").strip(),
            direction=Direction.parse(direction),
        )

    @property
    def is_identity(self) -> bool:
        return self.start_ms is None and self.end_ms is None and not self.ip_address


def record_time_ms(record: IPv4Record) -> int:
    # Sub-millisecond remainder is dropped to match the filter bound unit.
    return record.ts_sec * 1000 + record.ts_usec // 1000


def _time_matches(record: IPv4Record, criteria: FilterCriteria) -> bool:
    ts = record_time_ms(record)
    if criteria.start_ms is not None and ts < criteria.start_ms:
        return False
    if criteria.end_ms is not None and ts > criteria.end_ms:
        return False
    return True


def _ip_matches(record: IPv4Record, criteria: FilterCriteria) -> bool:
    target = criteria.ip_address
    if not target:
        return True
    direction = Direction.parse(criteria.direction)
    if direction is Direction.SOURCE:
        return record.source_ip == target
    if direction is Direction.DEST:
        return record.dest_ip == target
    if direction is Direction.ANY:
        return record.source_ip == target or record.dest_ip == target
    return True


def matches(record: IPv4Record, criteria: FilterCriteria) -> bool:
    return _time_matches(record, criteria) and _ip_matches(record, criteria)


def filter_records(records: Iterable[IPv4Record], criteria: FilterCriteria) -> list[IPv4Record]:
    return [record for record in records if matches(record, criteria)]
