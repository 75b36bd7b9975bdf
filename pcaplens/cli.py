from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .analyzer import CaptureAnalysis, analyze_capture
from .coloring import header, set_color_override
from .config import OUTPUT_FORMATS, Settings, load_settings
from .errors import CaptureIOError, FormatError
from .filters import FilterCriteria, filter_records
from .ips import ethertype_distribution, ip_distribution, protocol_distribution
from .reporting import render_ethernet_records, render_ip_stats, render_ipv4_records, render_summary
from .utils import to_serializable


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcaplens",
        description=f"pcaplens v{__version__}\n\nDecode classic pcap captures into Ethernet and IPv4 records.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "target",
        type=Path,
        help="Path to a classic pcap file.",
    )

    general = parser.add_argument_group(header("General Options"))
    records = parser.add_argument_group(header("Record Views"))
    filtering = parser.add_argument_group(header("IPv4 Filter"))
    output = parser.add_argument_group(header("Output Controls"))

    general.add_argument(
        "--config",
        metavar="PATH",
        help="TOML config file (default: ./pcaplens.toml, ~/.pcaplens.toml).",
    )
    general.add_argument(
        "--mmap",
        action="store_true",
        default=None,
        help="Memory-map the capture instead of reading it into memory.",
    )

    records.add_argument(
        "--ethernet",
        action="store_true",
        help="List decoded Ethernet frames.",
    )
    records.add_argument(
        "--ipv4",
        action="store_true",
        help="List decoded IPv4 packets (after filtering).",
    )
    records.add_argument(
        "--stats",
        action="store_true",
        help="Show protocol and source/destination IP distributions (after filtering).",
    )

    filtering.add_argument(
        "--start",
        metavar="TIME",
        help="Inclusive start, as epoch milliseconds or ISO-8601.",
    )
    filtering.add_argument(
        "--end",
        metavar="TIME",
        help="Inclusive end, as epoch milliseconds or ISO-8601.",
    )
    filtering.add_argument(
        "-ip",
        "--ip",
        dest="ip_address",
        metavar="ADDR",
        help="Only keep packets involving this IPv4 address.",
    )
    filtering.add_argument(
        "--direction",
        choices=["any", "source", "dest"],
        help="Which address --ip must match (default: any).",
    )

    output.add_argument(
        "--output",
        choices=list(OUTPUT_FORMATS),
        help="Output format (default: txt).",
    )
    output.add_argument(
        "-l",
        "--limit",
        type=int,
        help="Rows to show per table; 0 shows everything.",
    )
    output.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI color output.",
    )
    output.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress details.",
    )
    output.add_argument(
        "--debug",
        action="store_true",
        help="Log every skipped record.",
    )
    return parser


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.getLevelName(settings.log_level)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("scapy.runtime").setLevel(logging.ERROR)


def _build_json(
    analysis: CaptureAnalysis,
    criteria: FilterCriteria,
    *,
    show_ethernet: bool,
    show_ipv4: bool,
    show_stats: bool,
) -> dict[str, object]:
    ipv4 = filter_records(analysis.ipv4, criteria)
    payload: dict[str, object] = {
        "pcap": analysis.path.name,
        "header": analysis.header,
        "recordCount": analysis.record_count,
        "ethernetCount": len(analysis.ethernet),
        "ipv4Count": len(analysis.ipv4),
        "truncated": analysis.truncated,
        "warnings": analysis.warnings,
    }
    if show_ethernet:
        payload["ethernet"] = analysis.ethernet
    if show_ipv4:
        payload["ipv4"] = ipv4
    if show_stats:
        payload["stats"] = {
            "ethertypes": ethertype_distribution(analysis.ethernet),
            "protocols": protocol_distribution(ipv4),
            "ips": ip_distribution(ipv4),
        }
    return to_serializable(payload)


def _render_text(
    analysis: CaptureAnalysis,
    criteria: FilterCriteria,
    limit: int,
    *,
    show_ethernet: bool,
    show_ipv4: bool,
    show_stats: bool,
) -> str:
    sections = [render_summary(analysis, limit=limit)]
    ipv4 = filter_records(analysis.ipv4, criteria)
    if show_ethernet:
        sections.append(render_ethernet_records(analysis.ethernet, limit=limit))
    if show_ipv4:
        sections.append(render_ipv4_records(ipv4, limit=limit, criteria=criteria))
    if show_stats:
        sections.append(render_ip_stats(ipv4, limit=limit))
    return "\n".join(sections)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    _configure_logging(args, settings)

    if args.no_color:
        set_color_override(False)
    elif settings.color is not None:
        set_color_override(settings.color)

    target: Path = args.target
    if not target.exists():
        print(f"Target not found: {target}")
        return 2
    if not target.is_file():
        print(f"Target is not a file: {target}")
        return 2

    try:
        criteria = FilterCriteria.from_strings(
            start=args.start,
            end=args.end,
            ip_address=args.ip_address,
            direction=args.direction or settings.direction,
        )
    except ValueError as exc:
        print(f"Invalid time bound: {exc}")
        return 2

    use_mmap = settings.use_mmap if args.mmap is None else args.mmap
    try:
        analysis = analyze_capture(target, use_mmap=use_mmap)
    except (CaptureIOError, FormatError) as exc:
        print(f"Cannot analyze {target}: {exc}")
        return 2

    output_format = args.output or settings.output_format
    limit = settings.limit if args.limit is None else max(0, args.limit)
    view_flags = {
        "show_ethernet": args.ethernet,
        "show_ipv4": args.ipv4 or not criteria.is_identity,
        "show_stats": args.stats,
    }

    if output_format == "json":
        print(json.dumps(_build_json(analysis, criteria, **view_flags), indent=2))
    else:
        print(_render_text(analysis, criteria, limit, **view_flags))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
