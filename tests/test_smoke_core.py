from __future__ import annotations

import inspect
import re
import sys
import unittest
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

import pcaplens
import pcaplens.analyzer as analyzer
import pcaplens.reporting as reporting
from pcaplens.capture import CaptureHeader
from pcaplens.models import EthernetRecord, IPv4Record


def _header(linktype: int = 1) -> CaptureHeader:
    return CaptureHeader(
        magic=0xA1B2C3D4,
        byte_order="<",
        version_major=2,
        version_minor=4,
        thiszone=0,
        sigfigs=0,
        snaplen=65535,
        linktype=linktype,
    )


class TestSmokeCore(unittest.TestCase):
    def test_version_consistency(self) -> None:
        pyproject_path = Path(__file__).resolve().parents[1] / "pyproject.toml"
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
        self.assertEqual(data["project"]["version"], pcaplens.__version__)

    def test_public_operations_exported(self) -> None:
        for name in ("analyze_pcap", "analyze_ipv4_packets", "filter_records", "ip_distribution"):
            self.assertTrue(callable(getattr(pcaplens, name)), name)

    def test_analyzer_has_no_module_state(self) -> None:
        source = inspect.getsource(analyzer)
        self.assertIsNone(re.search(r"^\s*global\s", source, re.MULTILINE))

    def test_records_are_frozen(self) -> None:
        record = EthernetRecord(
            index=0,
            ethertype=0x0800,
            ethertype_label="IPv4",
            source="bb:bb:bb:bb:bb:bb",
            destination="aa:aa:aa:aa:aa:aa",
            ts_sec=1,
            ts_usec=2,
        )
        with self.assertRaises(AttributeError):
            record.ts_sec = 5  # type: ignore[misc]

    def test_render_empty_summary(self) -> None:
        analysis = analyzer.CaptureAnalysis(path=Path("empty.pcap"), header=_header())
        output = reporting.render_summary(analysis)
        self.assertIn("CAPTURE SUMMARY :: empty.pcap", output)
        self.assertIn("EtherType Breakdown", output)
        self.assertIn("(none)", output)
        self.assertNotIn("Warnings", output)

    def test_render_summary_lists_warnings(self) -> None:
        analysis = analyzer.CaptureAnalysis(
            path=Path("warn.pcap"),
            header=_header(linktype=1),
            warnings=[f"problem {i}" for i in range(5)],
        )
        output = reporting.render_summary(analysis, limit=2)
        self.assertIn("problem 1", output)
        self.assertNotIn("problem 2", output)
        self.assertIn("3 more", output)

    def test_linktype_labels(self) -> None:
        self.assertEqual(reporting._format_linktype(1), "Ethernet")
        self.assertEqual(reporting._format_linktype(None), "-")

    def test_linktype_from_scapy_registry(self) -> None:
        try:
            import scapy.layers.dot11  # noqa: F401
        except ImportError:  # pragma: no cover
            self.skipTest("scapy not installed")
        self.assertEqual(reporting._format_linktype(127), "RadioTap")
        self.assertEqual(reporting._format_linktype(65000), "LINKTYPE_65000")

    def test_render_ipv4_records_with_filter(self) -> None:
        record = IPv4Record(
            index=4,
            source_ip="10.0.0.1",
            dest_ip="10.0.0.2",
            protocol=89,
            protocol_label="OSPF",
            ttl=1,
            total_length=64,
            header_length=20,
            ts_sec=0,
            ts_usec=0,
        )
        criteria = pcaplens.FilterCriteria(ip_address="10.0.0.1", direction=pcaplens.Direction.SOURCE)
        output = reporting.render_ipv4_records([record], criteria=criteria)
        self.assertIn("OSPF", output)
        self.assertIn("ip 10.0.0.1 (source)", output)
        self.assertIn("1970-01-01T00:00:00Z", output)


if __name__ == "__main__":
    unittest.main()
