from __future__ import annotations

import re
from pathlib import Path
from typing import Callable

import pytest


FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


def _read_hex_fixture(name: str) -> bytes:
    path = FIXTURE_DIR / name
    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if not line.lstrip().startswith("#")]
    hex_text = re.sub(r"[^0-9a-fA-F]", "", "".join(lines))
    return bytes.fromhex(hex_text)


@pytest.fixture()
def scenario_bytes() -> bytes:
    return _read_hex_fixture("scenario.pcap.hex")


@pytest.fixture()
def scenario_pcap(tmp_path: Path, scenario_bytes: bytes) -> Path:
    out = tmp_path / "scenario.pcap"
    out.write_bytes(scenario_bytes)
    return out


@pytest.fixture()
def write_pcap(tmp_path: Path) -> Callable[..., Path]:
    def _write(data: bytes, name: str = "capture.pcap") -> Path:
        out = tmp_path / name
        out.write_bytes(data)
        return out

    return _write
