from __future__ import annotations


class PcapError(Exception):
    """Base class for capture parsing failures."""


class CaptureIOError(PcapError, OSError):
    """The capture file is missing, unreadable or not permitted."""


class FormatError(PcapError, ValueError):
    """The global header is corrupt or describes an unsupported format."""


class TruncatedRecordError(PcapError):
    """Fewer bytes remain than the next field needs."""

    def __init__(self, needed: int, available: int, offset: int) -> None:
        super().__init__(f"need {needed} bytes at offset {offset}, {available} available")
        self.needed = needed
        self.available = available
        self.offset = offset


class RecordDecodeError(PcapError, ValueError):
    """A single record could not be decoded; the rest of the file is unaffected."""
