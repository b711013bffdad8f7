import argparse
import dataclasses
import logging
import sys
from typing import Optional

from .bindiff import BinDiff
from .errors import BinDiffReaderError
from .render import (
    render_function_matches_json,
    render_function_matches_text,
    render_info_json,
    render_info_text,
)
from .summary import summarize

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ReportConfig:
    output_format: str  # "text" or "json"
    mode: str  # "info" or "functions"


defaultconfig = ReportConfig(
    output_format="text",
    mode="info",
)


def build_report(path: str, *, config: ReportConfig) -> str:
    with BinDiff.open(path) as bd:
        match config.mode:
            case "info":
                files = bd.read_file_records()
                metadata = bd.read_comparison_metadata()
                summary = summarize(bd)
                if config.output_format == "json":
                    return render_info_json(files, metadata, summary)
                return render_info_text(files, metadata, summary)
            case "functions":
                matches = bd.read_function_matches()
                logger.info("%d function matches in %s", len(matches), path)
                if config.output_format == "json":
                    return render_function_matches_json(matches)
                return render_function_matches_text(matches)
            case _:
                raise ValueError(f"unknown report mode `{config.mode}`")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the contents of a BinDiff result file")
    parser.add_argument("path")
    parser.add_argument("-j", "--json", action="store_true", help="output JSON instead of text")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-i", "--info", dest="mode", action="store_const", const="info", help="summary report (default)")
    group.add_argument(
        "-f", "--functions", dest="mode", action="store_const", const="functions", help="list function matches"
    )
    parser.add_argument(
        "--loglevel", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.loglevel, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    config = ReportConfig(
        output_format="json" if args.json else defaultconfig.output_format,
        mode=args.mode or defaultconfig.mode,
    )
    try:
        report = build_report(args.path, config=config)
    except BinDiffReaderError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    if report:
        print(report)


if __name__ == "__main__":
    main()
