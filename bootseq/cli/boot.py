"""CLI command that boots an application from a boot file.

After a successful boot it can optionally run the console hooks or one
task defined by the registered task loaders.
"""

from __future__ import annotations

import json
import logging

from rich.console import Console

from bootseq.config.loader import build_application
from bootseq.runtime.errors import ConfigurationError, LifecycleError

logger = logging.getLogger("bootseq.cli.boot")


def boot_command(args, console: Console | None = None) -> int:
    """Execute the boot command.

    Args:
        args: Parsed command-line arguments.
        console: Optional Rich console for output.

    Returns:
        int: Exit code (0 for success, 1 for any lifecycle error).
    """
    console = console or Console()
    orchestrator = None
    try:
        app, orchestrator = build_application(
            getattr(args, "config", None), name=getattr(args, "name", None) or "app"
        )
        if getattr(args, "collect_errors", False):
            orchestrator.settings.error_policy = "collect_all"
        if getattr(args, "no_eager_load", False):
            orchestrator.settings.eager_load = False

        report = app.boot(orchestrator)
        logger.info(
            "Booted %s: %d step(s) in %d ms",
            app.name,
            len(report.steps),
            int(report.duration * 1000),
        )

        if getattr(args, "console", False):
            orchestrator.run_console(app)

        task_name = getattr(args, "task", None)
        if task_name:
            registry = orchestrator.load_tasks()
            registry.run(task_name, app)

    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except LifecycleError as e:
        logger.error("Boot failed: %s", e)
        report = orchestrator.last_report if orchestrator is not None else None
        if report is not None and report.last_completed is not None:
            last = report.last_completed
            logger.error("Last successful step: %s (%s)", last.name, last.phase)
        return 1

    if getattr(args, "json", False):
        console.print_json(json.dumps(report.to_dict()))
    else:
        console.print(
            f"Booted {app.name}: phases={', '.join(report.phases_completed)}",
            markup=False,
            highlight=False,
        )
        console.print(
            f"Initializers: {', '.join(report.initializer_order) or '(none)'}",
            markup=False,
            highlight=False,
        )
    return 0
