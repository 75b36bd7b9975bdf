from __future__ import annotations

import io
import json
from contextlib import redirect_stdout
from pathlib import Path
from typing import Callable

import pytest

import pcaplens.cli as cli
from pcaplens.coloring import set_color_override

from pcap_builder import ipv4_capture


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(cli, "load_settings", lambda explicit=None: cli.Settings())
    yield
    set_color_override(None)


def _run(argv: list[str]) -> tuple[int, str]:
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        code = cli.main(argv)
    return code, buffer.getvalue()


FLOWS = [
    ("10.0.0.1", "10.0.0.2", 1000, 0, 6),
    ("10.0.0.2", "10.0.0.1", 1001, 0, 17),
    ("10.0.0.3", "10.0.0.1", 1002, 0, 1),
]


def test_missing_target(tmp_path: Path) -> None:
    code, out = _run([str(tmp_path / "missing.pcap"), "--no-color"])
    assert code == 2
    assert "Target not found" in out


def test_fatal_format_error(write_pcap: Callable[..., Path]) -> None:
    code, out = _run([str(write_pcap(b"garbage" * 10)), "--no-color"])
    assert code == 2
    assert "bad magic" in out


def test_text_summary(scenario_pcap: Path) -> None:
    code, out = _run([str(scenario_pcap), "--no-color", "--ethernet", "--ipv4", "--stats"])
    assert code == 0
    assert "CAPTURE SUMMARY :: scenario.pcap" in out
    assert "big-endian" in out
    assert "aa:aa:aa:aa:aa:aa" in out
    assert "10.0.0.1" in out
    assert "Top Sources" in out
    assert "\x1b[" not in out


def test_json_with_filter(write_pcap: Callable[..., Path]) -> None:
    path = write_pcap(ipv4_capture(FLOWS))
    code, out = _run([str(path), "--output", "json", "--ip", "10.0.0.1", "--direction", "dest", "--stats"])
    assert code == 0
    payload = json.loads(out)
    assert payload["recordCount"] == 3
    assert payload["ipv4Count"] == 3
    assert [item["sourceIp"] for item in payload["ipv4"]] == ["10.0.0.2", "10.0.0.3"]
    assert payload["stats"]["ips"]["total"] == 2
    assert payload["stats"]["ips"]["destinations"] == [{"ip": "10.0.0.1", "count": 2, "percentage": 100.0}]
    assert payload["header"]["snaplen"] == 65535


def test_time_window(write_pcap: Callable[..., Path]) -> None:
    path = write_pcap(ipv4_capture(FLOWS))
    code, out = _run([str(path), "--output", "json", "--ipv4", "--start", "1001000", "--end", "1001000"])
    assert code == 0
    payload = json.loads(out)
    assert [item["tsSec"] for item in payload["ipv4"]] == [1001]


def test_bad_time_bound(scenario_pcap: Path) -> None:
    code, out = _run([str(scenario_pcap), "--start", "tomorrow"])
    assert code == 2
    assert "Invalid time bound" in out


def test_truncated_capture_still_reports(write_pcap: Callable[..., Path]) -> None:
    path = write_pcap(ipv4_capture(FLOWS)[:-3])
    code, out = _run([str(path), "--no-color"])
    assert code == 0
    assert "Truncated" in out
    assert "Warnings" in out
