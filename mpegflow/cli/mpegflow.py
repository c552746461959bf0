"""CLI for extracting arranged or raw motion vectors from a video."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mpegflow.core import FlowConfig
from mpegflow.errors import MpegFlowError
from mpegflow.pipeline import FlowRunner


USAGE = (
    "Usage: mpegflow [--raw | [[--grid8x8] [--occupancy]]] videoPath\n"
    "  --help and -h will output this help message.\n"
    "  --raw will prevent motion vectors from being arranged in matrices.\n"
    "  --grid8x8 will force fine 8x8 grid.\n"
    "  --occupancy will append occupancy matrix after motion vector matrices.\n"
    "  --quiet will suppress debug output.\n"
    "  --config PATH will read default options from a YAML file.\n"
    "  --progress will show a progress bar on stderr.\n"
)

FLAG_OPTIONS = ("raw", "grid8x8", "occupancy", "quiet", "progress")


class UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser that reports bad arguments instead of exiting with 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="mpegflow", add_help=False)
    parser.add_argument("video_path", nargs="?", type=Path, help="Path to the input video")
    parser.add_argument("-h", "--help", action="store_true", help="Show usage")
    parser.add_argument("--raw", action="store_true", help="Print raw vectors instead of grids")
    parser.add_argument("--grid8x8", action="store_true", help="Use the fine 8x8 grid")
    parser.add_argument("--occupancy", action="store_true", help="Append occupancy grids")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress diagnostics")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with default options")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    return parser


def setup_logging(quiet: bool) -> None:
    logging.basicConfig(
        level=logging.ERROR if quiet else logging.WARNING,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def load_config(args: argparse.Namespace) -> FlowConfig:
    """YAML options first, then any flag given on the command line."""
    cfg = FlowConfig.from_yaml(args.config) if args.config else FlowConfig()
    for name in FLAG_OPTIONS:
        if getattr(args, name):
            setattr(cfg, name, True)
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        print(f"{e}\n{USAGE}", end="", file=sys.stderr)
        return 1

    if args.help or args.video_path is None:
        print(USAGE, end="", file=sys.stderr)
        return 1

    try:
        cfg = load_config(args)
        setup_logging(cfg.quiet)
        FlowRunner(cfg).run_video(args.video_path)
    except MpegFlowError as e:
        print(f"Error occurred: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
