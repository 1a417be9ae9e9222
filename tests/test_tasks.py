"""
Tests for the task executor contract the installer relies on.
"""

import pytest

from multimcpack.tasks import FunctionTask, Task, TaskExecutor


class RecordingTask(Task):
    def __init__(self, log, name, fail_in=None):
        super().__init__(name)
        self.log = log
        self.fail_in = fail_in
        self._dependents = []
        self._dependencies = []

    @property
    def dependents(self):
        return self._dependents

    @property
    def dependencies(self):
        return self._dependencies

    def do_pre_execute(self):
        return True

    def pre_execute(self):
        self.log.append(f"{self.name}:pre")
        if self.fail_in == "pre":
            raise RuntimeError("pre failed")
        self._dependents.append(FunctionTask(lambda: self.log.append("dependent"), name="dep"))

    def execute(self):
        self.log.append(f"{self.name}:execute")
        if self.fail_in == "execute":
            raise RuntimeError("execute failed")
        self._dependencies.append(FunctionTask(lambda: self.log.append("dependency"), name="follow"))


def test_phase_order():
    log = []
    TaskExecutor().run(RecordingTask(log, "t"))
    assert log == ["t:pre", "dependent", "t:execute", "dependency"]


def test_on_done_called_once_with_success():
    events = []
    task = RecordingTask([], "t")
    task.on_done(events.append)
    TaskExecutor().run(task)
    task.fire_done(None)
    assert len(events) == 1
    assert not events[0].failed


@pytest.mark.parametrize("phase", ["pre", "execute"])
def test_failure_stops_later_phases_and_is_reraised(phase):
    log, events = [], []
    task = RecordingTask(log, "t", fail_in=phase)
    task.on_done(events.append)
    with pytest.raises(RuntimeError, match=f"{phase} failed"):
        TaskExecutor().run(task)
    assert "dependency" not in log
    assert events[0].failed
    assert isinstance(events[0].exception, RuntimeError)


def test_failing_dependent_fails_parent_after_siblings_finish():
    log, events = [], []

    def boom():
        raise ValueError("dependent failed")

    class Parent(RecordingTask):
        def pre_execute(self):
            self._dependents.extend([
                FunctionTask(boom, name="boom"),
                FunctionTask(lambda: log.append("sibling"), name="sibling"),
            ])

    task = Parent(log, "t")
    task.on_done(events.append)
    with pytest.raises(ValueError, match="dependent failed"):
        TaskExecutor(max_workers=2).run(task)
    assert "sibling" in log
    assert "t:execute" not in log
    assert events[0].failed


def test_listener_error_does_not_mask_original_failure():
    task = RecordingTask([], "t", fail_in="execute")

    def bad_listener(event):
        raise OSError("listener broke")

    task.on_done(bad_listener)
    with pytest.raises(RuntimeError, match="execute failed"):
        TaskExecutor().run(task)


def test_with_stage_tags_and_returns_task():
    task = FunctionTask(lambda: 1)
    assert task.with_stage("modpack") is task
    assert task.stage == "modpack"
    TaskExecutor().run(task)
    assert task.result == 1
