"""Minimal named-task graph: dependencies first, each task once."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covgate._meta import logger
from covgate.errors import TaskGraphError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


@dataclass(slots=True)
class Task:
    name: str
    action: Callable[[], object] | None = None
    depends_on: tuple[str, ...] = ()


@dataclass(slots=True)
class TaskGraph:
    """Registry of tasks that runs a requested task after its dependencies."""

    tasks: dict[str, Task] = field(default_factory=dict)

    def register(
        self,
        name: str,
        action: Callable[[], object] | None = None,
        *,
        depends_on: Iterable[str] = (),
    ) -> Task:
        if name in self.tasks:
            msg = f"task {name!r} is already registered"
            raise TaskGraphError(msg)
        task = Task(name=name, action=action, depends_on=tuple(depends_on))
        self.tasks[name] = task
        return task

    def disable(self, name: str) -> None:
        """Keep *name* in the graph for ordering but drop its action."""
        self._get(name).action = None

    def _get(self, name: str) -> Task:
        try:
            return self.tasks[name]
        except KeyError as exc:
            msg = f"unknown task {name!r}"
            raise TaskGraphError(msg) from exc

    def execution_order(self, *targets: str) -> list[str]:
        """Return task names in the order they would run to reach *targets*."""
        order: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                cycle = " -> ".join([*visiting[visiting.index(name) :], name])
                msg = f"task dependency cycle: {cycle}"
                raise TaskGraphError(msg)
            task = self._get(name)
            visiting.append(name)
            for dep in task.depends_on:
                visit(dep)
            visiting.pop()
            done.add(name)
            order.append(name)

        for target in targets:
            visit(target)
        return order

    def run(self, *targets: str) -> list[str]:
        """Run *targets* and their dependencies; return the names that executed."""
        executed: list[str] = []
        for name in self.execution_order(*targets):
            task = self.tasks[name]
            if task.action is None:
                logger.info("> task %s SKIPPED", name)
                continue
            logger.info("> task %s", name)
            task.action()
            executed.append(name)
        return executed


__all__ = ["Task", "TaskGraph"]
