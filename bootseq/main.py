"""Main CLI entry point for bootseq.

Provides commands: phases, order, boot
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from bootseq.cli.boot import boot_command
from bootseq.cli.order import order_command, phases_command

logger = logging.getLogger("bootseq.cli")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] %(message)s",
        handlers=[handler],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bootseq",
        description="Bootseq - Application Lifecycle Orchestrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "phases",
        help="List lifecycle phases in execution order",
    )

    order_parser = subparsers.add_parser(
        "order",
        help="Resolve and print the initializer execution order",
    )
    order_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Boot configuration. Can be a path to a TOML/JSON file or an "
            "inline TOML/JSON string."
        ),
    )

    boot_parser = subparsers.add_parser(
        "boot",
        help="Boot an application from a boot configuration",
    )
    boot_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Boot configuration. Can be a path to a TOML/JSON file or an "
            "inline TOML/JSON string. When omitted, an empty application boots."
        ),
    )
    boot_parser.add_argument(
        "--name",
        default="app",
        help="Application name used in logs (default: app)",
    )
    boot_parser.add_argument(
        "--collect-errors",
        action="store_true",
        help="Run every callback and report all failures instead of stopping at the first",
    )
    boot_parser.add_argument(
        "--no-eager-load",
        action="store_true",
        help="Skip loading eager-load namespaces",
    )
    boot_parser.add_argument(
        "--console",
        action="store_true",
        help="Run console hooks after booting",
    )
    boot_parser.add_argument(
        "--task",
        help="Run the named task after booting",
    )
    boot_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run report as JSON",
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == "phases":
        return phases_command(args)
    elif args.command == "order":
        return order_command(args)
    elif args.command == "boot":
        return boot_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
