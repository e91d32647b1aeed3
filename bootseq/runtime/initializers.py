"""Named initializers and their ordering constraints.

Every initializer has a unique name and may declare that it runs
``before`` or ``after`` other, already registered, initializers. All
constraints, whichever side declared them, feed a single directed graph
where an edge ``u -> v`` means *u runs before v*. Resolution is a stable
Kahn sort: among initializers whose constraints are satisfied, the one
registered first runs first, so underspecified orderings fall back to
registration order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

from bootseq.runtime.errors import CyclicDependency, DuplicateName, UnknownInitializer
from bootseq.runtime.hooks import Callback

logger = logging.getLogger("bootseq.runtime.initializers")


def _as_name_set(names: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Normalise a before/after argument.

    A bare string is one name, not a sequence of characters.
    """
    if names is None:
        return frozenset()
    if isinstance(names, str):
        return frozenset([names])
    return frozenset(names)


@dataclass(frozen=True)
class Initializer:
    """A uniquely named unit of boot-time work.

    Attributes:
        name: Unique name within one orchestrator.
        callback: Callable receiving the application context.
        before: Initializers this one must precede.
        after: Initializers this one must follow.
        position: Registration index, used as the ordering tie-break.
    """

    name: str
    callback: Callback
    before: FrozenSet[str] = field(default_factory=frozenset)
    after: FrozenSet[str] = field(default_factory=frozenset)
    position: int = 0

    def edges(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(first, second)`` pairs contributed by this initializer."""
        for target in sorted(self.before):
            yield (self.name, target)
        for source in sorted(self.after):
            yield (source, self.name)


class InitializerGraph:
    """Registry of initializers plus the topological resolver."""

    def __init__(self) -> None:
        self._initializers: Dict[str, Initializer] = {}

    def register(
        self,
        name: str,
        callback: Callback,
        before: Optional[Iterable[str]] = None,
        after: Optional[Iterable[str]] = None,
    ) -> Initializer:
        """Register an initializer.

        Args:
            name: Unique initializer name.
            callback: Callable receiving the application context.
            before: Names of registered initializers this one must precede.
            after: Names of registered initializers this one must follow.

        Returns:
            Initializer: The registered initializer.

        Raises:
            DuplicateName: If ``name`` is already registered.
            UnknownInitializer: If a constraint references a name that is
                not registered yet. The graph is left untouched.
            TypeError: If ``callback`` is not callable.
        """
        if not isinstance(name, str) or not name:
            raise TypeError(f"Initializer name must be a non-empty string, got {name!r}")
        if not callable(callback):
            raise TypeError(f"Initializer callback must be callable, got {callback!r}")
        if name in self._initializers:
            raise DuplicateName(name)

        before_set = _as_name_set(before)
        after_set = _as_name_set(after)
        missing = {ref for ref in before_set | after_set if ref not in self._initializers}
        if missing:
            raise UnknownInitializer(name, missing)

        initializer = Initializer(
            name=name,
            callback=callback,
            before=before_set,
            after=after_set,
            position=len(self._initializers),
        )
        self._initializers[name] = initializer
        logger.debug(
            "Initializer %s registered (before=%s, after=%s)",
            name,
            sorted(before_set),
            sorted(after_set),
        )
        return initializer

    def get(self, name: str) -> Optional[Initializer]:
        return self._initializers.get(name)

    def __getitem__(self, name: str) -> Initializer:
        """Look up a registered initializer; ``KeyError`` if absent."""
        return self._initializers[name]

    def names(self) -> List[str]:
        """Initializer names in registration order."""
        return list(self._initializers)

    def __len__(self) -> int:
        return len(self._initializers)

    def __contains__(self, name: object) -> bool:
        return name in self._initializers

    def build_graph(self) -> nx.DiGraph:
        """Build the constraint graph; edge ``u -> v`` means u runs first."""
        graph = nx.DiGraph()
        for initializer in self._initializers.values():
            graph.add_node(initializer.name, position=initializer.position)
        for initializer in self._initializers.values():
            graph.add_edges_from(initializer.edges())
        return graph

    def resolve(self) -> List[str]:
        """Compute the execution order.

        Returns:
            List[str]: Every initializer name, consistent with all
            constraints, ties broken by registration order. Repeated calls
            on an unchanged graph return the same list.

        Raises:
            CyclicDependency: If the constraints contain a cycle.
        """
        graph = self.build_graph()
        positions = {name: init.position for name, init in self._initializers.items()}

        try:
            order = list(
                nx.lexicographical_topological_sort(graph, key=positions.__getitem__)
            )
        except nx.NetworkXUnfeasible as exc:
            raise self._cycle_error(graph) from exc

        logger.debug("Resolved initializer order: %s", order)
        return order

    def _cycle_error(self, graph: nx.DiGraph) -> CyclicDependency:
        """Describe the cycles that make ``graph`` unsortable."""
        positions = {name: init.position for name, init in self._initializers.items()}

        members: List[str] = []
        for component in nx.strongly_connected_components(graph):
            if len(component) > 1:
                members.extend(component)
        members.sort(key=positions.__getitem__)

        cycle: List[str] = []
        try:
            cycle = [source for source, _target in nx.find_cycle(graph)]
        except nx.NetworkXNoCycle:
            pass

        logger.error("Initializer constraints contain a cycle: %s", members)
        return CyclicDependency(members=members, cycle=cycle)


__all__ = ["Initializer", "InitializerGraph"]
