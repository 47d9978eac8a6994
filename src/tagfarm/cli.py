"""CLI argument parsing and dispatch."""

from __future__ import annotations

from tagfarm.config import create_config_interactive
from tagfarm.config import load_config
from tagfarm.config import merge_config_into_args
from tagfarm.linker import LinkConfig
from tagfarm.logging import configure_logging
from tagfarm.walker import process_file
from tagfarm.walker import run

import argparse
import logging
import pathlib
import sys


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tagfarm",
        description="Music curation: link tagged audio files into artist/album directories.",
        add_help=False,
    )
    parser.add_argument("-help", "--help", action="help", help="Show this help message and exit")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", default=False,
        help="Verbose diagnostics on standard error",
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", default=False,
        help="Only show warnings and errors",
    )

    parser.add_argument(
        "-h", "--hardlink", action="store_true", default=None,
        help="Use hardlinks instead of symlinks",
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", default=None,
        help="Show the links that would be made without creating them",
    )
    parser.add_argument(
        "--source", dest="music_dir", type=pathlib.Path, default=None,
        help="Music directory to scan (default from config, else ~/Music)",
    )
    parser.add_argument(
        "--farm", dest="farm_dir", type=pathlib.Path, default=None,
        help="Directory to place links in (default from config, else ~/MusicFarm)",
    )
    parser.add_argument(
        "--configure", action="store_true",
        help="Interactively create or update the config file",
    )
    parser.add_argument(
        "path", type=pathlib.Path, nargs="?", default=None,
        help="Process a single file instead of the music directory",
    )
    return parser


def cmd_file(args: argparse.Namespace, config: LinkConfig) -> None:
    """Link a single file."""
    links = process_file(args.path, config)
    if links is None:
        logger.info(f"No tags found in {args.path}.")
        return
    logger.info(f"{len(links)} link(s) for {args.path}.")


def cmd_walk(args: argparse.Namespace, config: LinkConfig) -> None:
    """Link every tagged file below the music directory."""
    if not args.music_dir.is_dir():
        logger.error(f"Music directory not found: {args.music_dir}")
        sys.exit(1)
    run(args.music_dir, config, progress=not (args.quiet or args.verbose))


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    if args.configure:
        create_config_interactive()
        return

    merge_config_into_args(args, load_config())
    config = LinkConfig(
        farm_dir=args.farm_dir,
        hardlink=args.hardlink,
        dry_run=args.dry_run,
    )

    if args.path is not None:
        cmd_file(args, config)
    else:
        cmd_walk(args, config)
