"""CLI commands that inspect phases and initializer order without booting.

``order`` resolves the initializer graph declared in a boot file
(including plugin initializers) and prints it; it can be used in CI to
catch cyclic constraints before deploying.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.table import Table

from bootseq.config.loader import build_application
from bootseq.runtime.errors import ConfigurationError, CyclicDependency
from bootseq.runtime.lifecycle import phases

logger = logging.getLogger("bootseq.cli.order")


def phases_command(args, console: Console | None = None) -> int:
    """Print the fixed lifecycle phase order."""
    console = console or Console()
    for index, name in enumerate(phases(), start=1):
        console.print(f"{index}. {name}", markup=False, highlight=False)
    return 0


def order_command(args, console: Console | None = None) -> int:
    """Resolve and print the initializer execution order.

    Args:
        args: Parsed command-line arguments (``config``).
        console: Optional Rich console for output.

    Returns:
        int: Exit code (0 for success, 1 on configuration or cycle errors).
    """
    console = console or Console()
    try:
        _app, orchestrator = build_application(getattr(args, "config", None))
        order = orchestrator.resolve()
    except CyclicDependency as e:
        logger.error("Initializer order cannot be resolved: %s", e)
        return 1
    except ConfigurationError as e:
        logger.error("Invalid boot configuration: %s", e)
        return 1

    graph = orchestrator.initializers
    table = Table(title="Initializer order")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Before")
    table.add_column("After")
    for index, name in enumerate(order, start=1):
        initializer = graph[name]
        table.add_row(
            str(index),
            name,
            ", ".join(sorted(initializer.before)),
            ", ".join(sorted(initializer.after)),
        )
    console.print(table)
    return 0
