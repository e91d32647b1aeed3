"""
Lifecycle orchestrator for coordinating application boot.

This module provides the LifecycleOrchestrator class that owns the hook
table and the initializer graph, and executes all lifecycle phases in
their fixed order exactly once.

Execution Flow:
    1. Registration window: hooks, initializers and auxiliary hooks are
       registered in any order; nothing runs.
    2. ``run(context)``: registration closes, then every phase runs in
       order. For INITIALIZE the initializer graph is resolved before any
       callback of that phase runs; phase hooks run first, then
       initializers in resolved order. After the BEFORE_EAGER_LOAD hooks,
       eager-load namespaces are loaded when enabled.
    3. After a successful run, ``prepare``, ``run_console`` and
       ``load_tasks`` may be invoked by the host on demand.

Error Handling:
    - fail_fast (default): the first failing callback aborts the rest of
      the phase and the lifecycle; a CallbackError is raised.
    - collect_all: every callback runs; a CallbackErrorGroup is raised at
      the end if anything failed.
"""

from __future__ import annotations

import contextlib
import logging
import time
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from bootseq.config.schema import OrchestratorSettings
from bootseq.notifications import Notifications
from bootseq.runtime.errors import (
    AlreadyRun,
    CallbackError,
    CallbackErrorGroup,
    ConfigurationError,
    CyclicDependency,
    RegistrationClosed,
)
from bootseq.runtime.hooks import Callback, Hook, HookTable, callback_name
from bootseq.runtime.initializers import Initializer, InitializerGraph
from bootseq.runtime.lifecycle import (
    INITIALIZATION_PHASE,
    PHASE_ORDER,
    LifecyclePhase,
    phases,
)
from bootseq.runtime.protocols import EagerLoadable, TaskLoader
from bootseq.runtime.report import RunReport, StepKind, StepRecord, StepStatus
from bootseq.runtime.tasks import TaskRegistry

logger = logging.getLogger("bootseq.runtime.orchestrator")

PHASE_EVENT = "phase.bootseq"


class RunState(Enum):
    """Orchestrator state machine."""

    CONFIGURING = "configuring"
    RUNNING = "running"
    RAN = "ran"
    FAILED = "failed"


class LifecycleOrchestrator:
    """
    Single-shot owner of lifecycle hooks and initializers.

    Example:
        orchestrator = LifecycleOrchestrator()
        orchestrator.register_hook("before_initialize", lambda app: ...)
        orchestrator.register_initializer("db.connect", connect)
        orchestrator.register_initializer("db.migrate", migrate, after=["db.connect"])
        report = orchestrator.run(app)

    Attributes:
        settings: Orchestrator behaviour (error policy, eager load, logging)
        notifications: Optional bus; each phase is instrumented on it
        last_report: Report of the most recent run, prepare, or console
            run, available even when it raised
    """

    def __init__(
        self,
        settings: Optional[OrchestratorSettings] = None,
        notifications: Optional[Notifications] = None,
    ) -> None:
        self.settings = settings or OrchestratorSettings()
        self.notifications = notifications
        self.last_report: Optional[RunReport] = None

        self._state = RunState.CONFIGURING
        self._hooks = HookTable()
        self._initializers = InitializerGraph()
        self._eager_load_namespaces: List[EagerLoadable] = []
        self._console_hooks: List[Tuple[str, Callback]] = []
        self._task_loaders: List[Tuple[str, TaskLoader]] = []

    # ===== Introspection =====

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def hooks(self) -> HookTable:
        return self._hooks

    @property
    def initializers(self) -> InitializerGraph:
        return self._initializers

    def phases(self) -> Tuple[str, ...]:
        """Fixed phase names in execution order."""
        return phases()

    def resolve(self) -> List[str]:
        """Resolve the initializer order without running anything."""
        return self._initializers.resolve()

    # ===== Registration =====

    def _ensure_open(self, what: str) -> None:
        if self._state is not RunState.CONFIGURING:
            raise RegistrationClosed(
                f"Cannot register {what}: orchestrator is {self._state.value}"
            )

    def register_hook(
        self,
        phase: Union[LifecyclePhase, str],
        callback: Callback,
        name: Optional[str] = None,
    ) -> Hook:
        """Append ``callback`` to the hooks of ``phase``.

        Raises:
            UnknownPhase: If ``phase`` is not a lifecycle phase.
            RegistrationClosed: If ``run()`` has started.
        """
        self._ensure_open("hook")
        return self._hooks.register(phase, callback, name=name)

    def register_initializer(
        self,
        name: str,
        callback: Callback,
        before: Optional[Iterable[str]] = None,
        after: Optional[Iterable[str]] = None,
    ) -> Initializer:
        """Register a named initializer.

        Raises:
            DuplicateName: If ``name`` is taken.
            UnknownInitializer: If a constraint names a missing initializer.
            RegistrationClosed: If ``run()`` has started.
        """
        self._ensure_open("initializer")
        return self._initializers.register(name, callback, before=before, after=after)

    def register_eager_load_namespace(self, namespace: EagerLoadable) -> None:
        """Register an object whose ``eager_load()`` runs during BEFORE_EAGER_LOAD."""
        self._ensure_open("eager-load namespace")
        if not isinstance(namespace, EagerLoadable):
            raise TypeError(f"{namespace!r} does not provide eager_load()")
        self._eager_load_namespaces.append(namespace)

    def register_console_hook(self, callback: Callback, name: Optional[str] = None) -> None:
        """Register a callback run when the host starts its console."""
        self._ensure_open("console hook")
        if not callable(callback):
            raise TypeError(f"Console hook must be callable, got {callback!r}")
        self._console_hooks.append((name or callback_name(callback), callback))

    def register_task_loader(self, loader: TaskLoader, name: Optional[str] = None) -> None:
        """Register a callable that defines tasks on a TaskRegistry."""
        self._ensure_open("task loader")
        if not callable(loader):
            raise TypeError(f"Task loader must be callable, got {loader!r}")
        self._task_loaders.append((name or callback_name(loader), loader))

    # ===== Execution =====

    def run(self, context: Any) -> RunReport:
        """
        Execute every phase once.

        Args:
            context: Application context passed to every callback untouched

        Returns:
            RunReport describing every executed step

        Raises:
            AlreadyRun: If the orchestrator has already started running
            CyclicDependency: If initializer constraints contain a cycle;
                raised before any initializer callback runs
            CallbackError: First callback failure (fail_fast)
            CallbackErrorGroup: All callback failures (collect_all)
        """
        if self._state is not RunState.CONFIGURING:
            raise AlreadyRun(self._state.value)
        self._state = RunState.RUNNING

        report = RunReport()
        self.last_report = report
        started = time.perf_counter()
        logger.info(
            "Starting lifecycle: %d hook(s), %d initializer(s), policy=%s",
            self._hooks.count(),
            len(self._initializers),
            self.settings.error_policy,
        )

        try:
            for phase in PHASE_ORDER:
                self._run_phase(phase, context, report)
        except (CallbackError, CyclicDependency) as e:
            self._state = RunState.FAILED
            logger.error("Lifecycle aborted: %s", e)
            raise
        except BaseException:
            # KeyboardInterrupt, SystemExit and the like are not wrapped.
            self._state = RunState.FAILED
            logger.error("Lifecycle interrupted")
            raise
        finally:
            report.duration = time.perf_counter() - started

        if report.errors:
            self._state = RunState.FAILED
            logger.error("Lifecycle finished with %d failure(s)", len(report.errors))
            raise CallbackErrorGroup(report.errors)

        self._state = RunState.RAN
        logger.info(
            "Lifecycle complete (duration_ms=%d, steps=%d)",
            int(report.duration * 1000),
            len(report.steps),
        )
        return report

    def _run_phase(self, phase: LifecyclePhase, context: Any, report: RunReport) -> None:
        """Run one phase: hooks, then initializers or eager loading where applicable."""
        phase_start = time.perf_counter()
        logger.info("=== Phase: %s ===", phase.value)

        order: List[str] = []
        if phase is INITIALIZATION_PHASE:
            order = self._initializers.resolve()
            report.initializer_order = list(order)

        with self._instrument(phase):
            for hook in self._hooks.hooks_for(phase):
                self._invoke(phase.value, hook.name, hook.callback, context, StepKind.HOOK, report)

            for name in order:
                initializer = self._initializers[name]
                self._invoke(
                    phase.value, name, initializer.callback, context, StepKind.INITIALIZER, report
                )

            if phase is LifecyclePhase.BEFORE_EAGER_LOAD:
                self._eager_load(context, report)

        report.phases_completed.append(phase.value)
        logger.info(
            "Phase complete: %s (duration_ms=%d)",
            phase.value,
            int((time.perf_counter() - phase_start) * 1000),
        )

    def _eager_load(self, context: Any, report: RunReport) -> None:
        if not self.settings.eager_load:
            if self._eager_load_namespaces:
                logger.info(
                    "Eager loading disabled; skipping %d namespace(s)",
                    len(self._eager_load_namespaces),
                )
            return

        for namespace in self._eager_load_namespaces:
            name = getattr(namespace, "__name__", None) or type(namespace).__name__
            self._invoke(
                LifecyclePhase.BEFORE_EAGER_LOAD.value,
                name,
                lambda _ctx, ns=namespace: ns.eager_load(),
                context,
                StepKind.EAGER_LOAD,
                report,
            )

    def _instrument(self, phase: LifecyclePhase) -> contextlib.AbstractContextManager:
        if self.notifications is None:
            return contextlib.nullcontext()
        return self.notifications.instrument(PHASE_EVENT, {"phase": phase.value})

    def _invoke(
        self,
        phase: str,
        name: str,
        callback: Callable[[Any], Any],
        context: Any,
        kind: StepKind,
        report: RunReport,
    ) -> None:
        """Invoke one callback and record the outcome.

        Raises:
            CallbackError: On failure when the error policy is fail_fast.
        """
        if self.settings.log_callbacks:
            logger.info("Running %s %s (%s)", kind.value, name, phase)
        else:
            logger.debug("Running %s %s (%s)", kind.value, name, phase)

        step_start = time.perf_counter()
        try:
            callback(context)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            error = CallbackError(phase, name, exc, kind=kind.value)
            error.__cause__ = exc
            report.steps.append(
                StepRecord(
                    phase=phase,
                    name=name,
                    kind=kind,
                    status=StepStatus.FAILED,
                    duration=time.perf_counter() - step_start,
                    error=error,
                )
            )
            report.errors.append(error)
            logger.error("%s", error, exc_info=True)
            if self.settings.error_policy == "fail_fast":
                raise error from exc
            return

        report.steps.append(
            StepRecord(
                phase=phase,
                name=name,
                kind=kind,
                status=StepStatus.COMPLETED,
                duration=time.perf_counter() - step_start,
            )
        )

    # ===== Post-boot entry points =====

    def _ensure_booted(self, what: str) -> None:
        if self._state is not RunState.RAN:
            raise ConfigurationError(
                f"Cannot {what}: lifecycle has not completed (state={self._state.value})"
            )

    def _run_auxiliary(
        self,
        label: str,
        kind: StepKind,
        entries: Iterable[Tuple[str, Callable[[Any], Any]]],
        argument: Any,
    ) -> RunReport:
        report = RunReport()
        self.last_report = report
        started = time.perf_counter()
        try:
            for name, callback in entries:
                self._invoke(label, name, callback, argument, kind, report)
        finally:
            report.duration = time.perf_counter() - started
        if report.errors:
            raise CallbackErrorGroup(report.errors)
        return report

    def prepare(self, context: Any) -> RunReport:
        """Re-run the TO_PREPARE hooks, e.g. before a request after code reload.

        Raises:
            ConfigurationError: If the lifecycle has not completed.
        """
        self._ensure_booted("prepare")
        phase = LifecyclePhase.TO_PREPARE
        logger.info("Re-running %s hooks", phase.value)
        report = self._run_auxiliary(
            phase.value,
            StepKind.HOOK,
            [(hook.name, hook.callback) for hook in self._hooks.hooks_for(phase)],
            context,
        )
        report.phases_completed.append(phase.value)
        return report

    def run_console(self, context: Any) -> RunReport:
        """Run console hooks in registration order.

        Raises:
            ConfigurationError: If the lifecycle has not completed.
        """
        self._ensure_booted("start console")
        return self._run_auxiliary("console", StepKind.CONSOLE, self._console_hooks, context)

    def load_tasks(self, registry: Optional[TaskRegistry] = None) -> TaskRegistry:
        """Let every task loader define its tasks.

        Args:
            registry: Registry to populate; a new one is created if omitted.

        Returns:
            The populated TaskRegistry.

        Raises:
            ConfigurationError: If the lifecycle has not completed.
        """
        self._ensure_booted("load tasks")
        registry = registry if registry is not None else TaskRegistry()
        self._run_auxiliary("tasks", StepKind.TASKS, self._task_loaders, registry)
        logger.info("Loaded %d task(s)", len(registry))
        return registry


__all__ = ["LifecycleOrchestrator", "RunState", "PHASE_EVENT"]
