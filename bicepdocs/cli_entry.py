"""
Command-line interface for bicep-docs

Generates Markdown documentation for a Bicep file, or for every main.bicep
file under a directory.
"""

import argparse
import logging
import sys
from typing import List, Optional

from bicepdocs import __version__
from bicepdocs.cli.process import generate_docs
from bicepdocs.cli.rich_output import RichOutputManager
from bicepdocs.cli.sections import DEFAULT_SECTIONS_STRING, resolve_sections
from bicepdocs.config import OUTPUT_FILENAME, TRIGGER_FILENAME, load_config
from bicepdocs.errors import BicepDocsError
from bicepdocs.markdown import SyncStatus

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bicep-docs",
        description=(
            "bicep-docs is a command-line tool that generates documentation for Bicep templates."
        ),
        epilog=(
            f"If the input is a directory, every {TRIGGER_FILENAME} file below it is documented "
            f"in a {OUTPUT_FILENAME} file in the same directory."
        ),
    )

    parser.add_argument(
        "--input",
        "-i",
        default=".",
        help="Input Bicep file or directory (default: current directory)",
    )

    parser.add_argument(
        "--output",
        "-o",
        default=None,
        help=(
            f"Output Markdown file (default: {OUTPUT_FILENAME} next to the Bicep file); "
            "ignored if the input is a directory"
        ),
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=None,
        help="Print whether each Markdown file was created, updated or left unchanged",
    )

    sections_group = parser.add_mutually_exclusive_group()
    sections_group.add_argument(
        "--include-sections",
        default=None,
        help=f"Comma-separated sections to include, in order (default: {DEFAULT_SECTIONS_STRING})",
    )
    sections_group.add_argument(
        "--exclude-sections",
        default=None,
        help="Comma-separated sections to leave out of the default set",
    )

    parser.add_argument(
        "--show-all-decorators",
        action="store_true",
        default=None,
        help="Add columns for every decorator (allowed values, length and value bounds, export)",
    )

    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable rich terminal output (use plain text)",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)
    output = RichOutputManager(use_rich=not args.no_rich)

    try:
        sections = resolve_sections(args.include_sections, args.exclude_sections)
        config = load_config(
            config_path=args.config,
            overrides={
                "sections": sections,
                "verbose": args.verbose,
                "show_all_decorators": args.show_all_decorators,
            },
        )
        logger.debug(config.get_config_summary())

        def _report(markdown_file: str, status: SyncStatus) -> None:
            if config.verbose:
                if status is SyncStatus.UNCHANGED:
                    output.print_info(status.message(markdown_file))
                else:
                    output.print_success(status.message(markdown_file))

        results = generate_docs(args.input, args.output, config, on_result=_report)
        if config.verbose and not results:
            output.print_warning(f"No {config.trigger_filename} files found under {args.input}")
    except BicepDocsError as e:
        logger.debug("bicep-docs failed", exc_info=True)
        output.print_error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
