"""
multimcpack.tasks
-----------------

Units of work and the executor that runs them.

A Task goes through ``pre_execute`` (only when ``do_pre_execute()`` is True),
then its *dependents* run, then ``execute``, then its *dependencies* run.
Units registered in either list may be added by the earlier phases of the
same task. When the whole unit has finished, successfully or not, every
``on_done`` listener is called exactly once with a TaskEvent.

Sibling units are run concurrently on a ThreadPoolExecutor.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import *

logger = logging.getLogger(__name__)


@dataclass
class TaskEvent:
    """Outcome passed to ``on_done`` listeners."""
    task: "Task"
    failed: bool
    exception: Optional[BaseException] = None


class Task:
    """Base class for a unit of work."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.stage: Optional[str] = None
        self.exception: Optional[BaseException] = None
        self._done_listeners: List[Callable[[TaskEvent], None]] = []
        self._done_fired = False
        self._done_lock = threading.Lock()

    def with_stage(self, stage: str) -> "Task":
        """Tag this unit as belonging to `stage`; returns self for chaining."""
        self.stage = stage
        return self

    def do_pre_execute(self) -> bool:
        return False

    def pre_execute(self) -> None:
        pass

    def execute(self) -> None:
        raise NotImplementedError

    @property
    def dependents(self) -> List["Task"]:
        """Units run after pre_execute and before execute."""
        return []

    @property
    def dependencies(self) -> List["Task"]:
        """Units that must finish after execute before this unit is done."""
        return []

    def on_done(self, listener: Callable[[TaskEvent], None]) -> "Task":
        self._done_listeners.append(listener)
        return self

    def fire_done(self, exception: Optional[BaseException]) -> None:
        """Notify listeners once; a failing listener is logged and never re-raised."""
        with self._done_lock:
            if self._done_fired:
                return
            self._done_fired = True
        self.exception = exception
        event = TaskEvent(task=self, failed=exception is not None, exception=exception)
        for listener in self._done_listeners:
            try:
                listener(event)
            except Exception:
                logger.warning("on_done listener of %s failed", self.name, exc_info=True)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} stage={self.stage!r}>"


class FunctionTask(Task):
    """Wraps a plain callable; its return value is kept in ``result``."""

    def __init__(self, func: Callable[[], Any], name: Optional[str] = None):
        super().__init__(name or getattr(func, "__name__", None))
        self.func = func
        self.result: Any = None

    def execute(self) -> None:
        self.result = self.func()


class TaskExecutor:
    """
    Runs a Task together with the units it declares.

    Parameters
    ----------
    max_workers : int
        Upper bound of sibling units run at the same time.
    """

    def __init__(self, max_workers: int = 4):
        self.max_workers = max(1, int(max_workers))

    def run(self, task: Task) -> None:
        """Run `task` to completion; the first failure is re-raised unchanged."""
        self._execute(task)

    def _execute(self, task: Task) -> None:
        exception: Optional[BaseException] = None
        try:
            if task.do_pre_execute():
                task.pre_execute()
            self._execute_all(task.dependents)
            task.execute()
            self._execute_all(task.dependencies)
        except BaseException as exc:
            exception = exc
            raise
        finally:
            task.fire_done(exception)

    def _execute_all(self, tasks: Iterable[Task]) -> None:
        tasks = list(tasks)
        if not tasks:
            return
        if len(tasks) == 1 or self.max_workers == 1:
            for t in tasks:
                self._execute(t)
            return

        errors: List[BaseException] = []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tasks))) as exe:
            futures = [exe.submit(self._execute, t) for t in tasks]
            for fut in futures:
                try:
                    fut.result()
                except Exception as exc:
                    errors.append(exc)
        if errors:
            raise errors[0]
