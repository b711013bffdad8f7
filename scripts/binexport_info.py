import argparse
import sys
from typing import Optional

from bindiff_reader.binexport import BinExport
from bindiff_reader.errors import BinDiffReaderError


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the executable name recorded in a BinExport file")
    parser.add_argument("path")
    parser.add_argument("-v", "--verbose", action="store_true", help="also print sections and call graph size")
    return parser.parse_args(argv)


def describe(binexport: BinExport, *, verbose: bool) -> str:
    lines = [f"executable_name: {binexport.executable_name()}"]
    if verbose:
        lines.append(f"architecture:    {binexport.architecture_name() or '-'}")
        lines.append(f"sections:        {len(binexport.sections)}")
        g = binexport.call_graph
        lines.append(f"call graph:      {g.number_of_nodes()} vertices, {g.number_of_edges()} edges")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    try:
        output = describe(BinExport.open(args.path), verbose=args.verbose)
    except BinDiffReaderError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    print(output)


if __name__ == "__main__":
    main()
