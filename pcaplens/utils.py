from __future__ import annotations

from dataclasses import is_dataclass, asdict
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Any


PCAPNG_MAGIC = b"\x0a\x0d\x0d\x0a"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_mac(raw: bytes) -> str:
    return ":".join(f"{b:02x}" for b in raw)


def format_ipv4(raw: bytes) -> str:
    return ".".join(str(b) for b in raw)


def format_bytes_as_mb(size_bytes: int) -> str:
    mb = size_bytes / (1024 * 1024)
    return f"{mb:.2f} MB"


def format_ts(ts_sec: Optional[int], ts_usec: int = 0) -> str:
    if ts_sec is None:
        return "-"
    dt = datetime.fromtimestamp(ts_sec, tz=timezone.utc).replace(microsecond=ts_usec % 1_000_000)
    return dt.isoformat().replace("+00:00", "Z")


def format_ms(value: Optional[int]) -> str:
    if value is None:
        return "-"
    seconds, millis = divmod(int(value), 1000)
    return format_ts(seconds, millis * 1000)


def to_serializable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return to_serializable(value.value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, dict):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_serializable(item) for item in value]
    if hasattr(value, "to_dict") and callable(getattr(value, "to_dict")):
        return to_serializable(value.to_dict())
    if is_dataclass(value):
        return to_serializable(asdict(value))
    return str(value)


def parse_time_arg(value: Optional[str]) -> Optional[int]:
    """Parse a time bound as a millisecond epoch.

    Accepts integer milliseconds (``1700000000123``) or an ISO-8601 string;
    naive ISO times are taken as UTC. Returns None for blank input and
    raises ValueError for anything else.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(milliseconds=1)
