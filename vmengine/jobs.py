"""A first-in, first-out queue of render, data and custom jobs."""

from __future__ import annotations

from collections.abc import Callable, Iterator, MutableMapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from vmengine.engine import CommandType

if TYPE_CHECKING:
    from vmengine.engine import VirtualMachine


class JobType(Enum):
    """What a job does when processed."""

    RENDER = auto()
    DATA = auto()
    CUSTOM = auto()


def _snapshot(state: VirtualMachine) -> dict[str, Any]:
    return {
        "window": state.window,
        "initialized": state.initialized,
        "clear_color": state.clear_color,
        "frame_time": state.frame_time,
        "vsync_enabled": state.vsync_enabled,
        "stack_size": len(state),
    }


@dataclass(eq=False)
class Job:
    """A unit of work; compared by identity."""

    type: JobType
    state: VirtualMachine | None = None
    output: MutableMapping[str, Any] | None = None
    custom_data: Any = None
    callback: Callable[[Any], None] | None = None
    completed: bool = False

    def run(self) -> None:
        """Do the job's work and mark it completed."""
        if self.type is JobType.RENDER:
            if self.state is not None:
                self.state.push(CommandType.RENDER)
                self.state.execute_next()
        elif self.type is JobType.DATA:
            if self.state is not None and self.output is not None:
                self.output.update(_snapshot(self.state))
        elif self.callback is not None:
            self.callback(self.custom_data)
        self.completed = True


def render_job(state: VirtualMachine | None) -> Job:
    """A job that renders one frame of ``state``."""
    return Job(JobType.RENDER, state=state)


def data_job(state: VirtualMachine | None, output: MutableMapping[str, Any] | None) -> Job:
    """A job that copies the observable state of ``state`` into ``output``."""
    return Job(JobType.DATA, state=state, output=output)


def custom_job(custom_data: Any, callback: Callable[[Any], None] | None) -> Job:
    """A job that calls ``callback(custom_data)``."""
    return Job(JobType.CUSTOM, custom_data=custom_data, callback=callback)


class JobQueue:
    """Jobs run in the order they were added; finished jobs leave the queue."""

    def __init__(self) -> None:
        self._jobs: list[Job] = []
        self._running = False

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[Job]:
        return iter(list(self._jobs))

    def __contains__(self, job: object) -> bool:
        return any(queued is job for queued in self._jobs)

    @property
    def running(self) -> bool:
        """Whether the queue is being processed right now."""
        return self._running

    def add(self, job: Job | None) -> None:
        """Append a job; ``None`` is ignored."""
        if job is not None:
            self._jobs.append(job)

    def _discard(self, job: Job) -> bool:
        for index, queued in enumerate(self._jobs):
            if queued is job:
                del self._jobs[index]
                return True
        return False

    def process(self) -> None:
        """Run every queued job, including ones added while processing.

        Does nothing if the queue is empty or already being processed.
        """
        if self._running or not self._jobs:
            return
        self._running = True
        try:
            while self._jobs:
                job = self._jobs[0]
                job.run()
                if job.completed:
                    self._discard(job)
        finally:
            self._running = False

    def wait_completion(self) -> None:
        """Process until the queue is empty."""
        if self._running:
            raise RuntimeError("cannot wait for the queue from inside a job")
        while self._jobs:
            self.process()

    def release(self, job: Job | None) -> None:
        """Remove a job from the queue without running it."""
        if job is not None:
            self._discard(job)

    def is_empty(self) -> bool:
        """Whether no job is queued."""
        return not self._jobs

    def shutdown(self) -> None:
        """Drop every queued job."""
        self._jobs.clear()
        self._running = False