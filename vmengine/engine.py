"""A small command-stack engine that drives a renderer and reads its settings from flags."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from os import PathLike
from typing import Any, Protocol

from vmengine.flags import FlagRegistry, FlagType
from vmengine.instances import InstanceRegistry, shared_registry

DEFAULT_STACK_CAPACITY = 256
FRAME_TIME_30FPS_NS = 33_333_333

_DEFAULT_FLAGS: tuple[tuple[str, FlagType, Any], ...] = (
    ("limitfps30", FlagType.BOOL, False),
    ("vsync", FlagType.BOOL, True),
    ("fullscreen", FlagType.BOOL, False),
    ("msaa", FlagType.INT, 4),
    ("resolution_width", FlagType.INT, 1280),
    ("resolution_height", FlagType.INT, 720),
    ("gamma", FlagType.FLOAT, 1.0),
    ("renderer", FlagType.STRING, "vulkan"),
)


class CommandType(Enum):
    """Commands the engine understands."""

    RENDER = auto()
    UPDATE = auto()
    INIT = auto()
    CLEANUP = auto()
    CLEAR_COLOR = auto()
    CUSTOM = auto()


@dataclass(frozen=True)
class Command:
    """One entry of the command stack."""

    type: CommandType
    data: Any = None
    callback: Callable[[], None] | None = None


class Renderer(Protocol):
    """What the engine needs from a renderer."""

    def init(self, window: Any) -> None:
        """Prepare to draw into ``window``."""

    def draw(self, clear_color: tuple[float, float, float, float]) -> None:
        """Draw one frame cleared to ``clear_color``."""

    def cleanup(self) -> None:
        """Release everything acquired by ``init``."""


class NullRenderer:
    """A renderer that draws nothing but keeps count of the frames it was asked for."""

    def __init__(self) -> None:
        self.window: Any = None
        self.active = False
        self.frames = 0
        self.last_clear_color: tuple[float, ...] | None = None

    def init(self, window: Any) -> None:
        """Attach to a window."""
        self.window = window
        self.active = True

    def draw(self, clear_color: Sequence[float]) -> None:
        """Count a frame if attached."""
        if not self.active:
            return
        self.frames += 1
        self.last_clear_color = tuple(clear_color)

    def cleanup(self) -> None:
        """Detach from the window."""
        self.active = False
        self.window = None


def _register_defaults(flags: FlagRegistry) -> None:
    registrars = {
        FlagType.BOOL: flags.register_bool,
        FlagType.INT: flags.register_int,
        FlagType.FLOAT: flags.register_float,
        FlagType.STRING: flags.register_string,
    }
    for name, flag_type, default in _DEFAULT_FLAGS:
        if not flags.exists(name):
            registrars[flag_type](name, default)


class VirtualMachine:
    """Runs commands from a bounded last-in, first-out stack."""

    def __init__(
        self,
        window: Any = None,
        renderer: Renderer | None = None,
        flags: FlagRegistry | None = None,
        instances: InstanceRegistry | None = None,
        capacity: int = DEFAULT_STACK_CAPACITY,
    ) -> None:
        self.flags = FlagRegistry() if flags is None else flags
        _register_defaults(self.flags)
        self.instances = shared_registry if instances is None else instances
        self.instances.register(window)

        self.window = window
        self.renderer: Renderer = NullRenderer() if renderer is None else renderer
        self.capacity = capacity
        self.initialized = False
        self.clear_color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
        self.frame_time = 0
        self.vsync_enabled = False
        self._stack: list[Command] = []
        self._destroyed = False

    def __len__(self) -> int:
        return len(self._stack)

    def __enter__(self) -> VirtualMachine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.destroy()

    @property
    def destroyed(self) -> bool:
        """Whether ``destroy`` has run."""
        return self._destroyed

    def push(
        self,
        command_type: CommandType,
        data: Any = None,
        callback: Callable[[], None] | None = None,
    ) -> bool:
        """Push a command; returns False and drops it when the stack is full."""
        if self._destroyed:
            raise RuntimeError("engine has been destroyed")
        if len(self._stack) >= self.capacity:
            return False
        self._stack.append(Command(command_type, data, callback))
        return True

    def execute_next(self) -> bool:
        """Pop and run the top command; returns False when there was none."""
        if not self._stack:
            return False
        self.instances.validate()
        command = self._stack.pop()
        self._run(command)
        return True

    def _run(self, command: Command) -> None:
        kind = command.type
        if kind is CommandType.INIT:
            if not self.initialized:
                self.renderer.init(self.window)
                self.initialized = True
        elif kind is CommandType.RENDER:
            if self.initialized:
                self.frame_time = FRAME_TIME_30FPS_NS if self.flags.get_bool("limitfps30") else 0
                self.vsync_enabled = self.flags.get_bool("vsync")
                self.renderer.draw(self.clear_color)
        elif kind is CommandType.CLEAR_COLOR:
            if command.data:
                self.clear_color = _as_color(command.data)
        elif kind is CommandType.CLEANUP:
            self.destroy()
        elif kind is CommandType.CUSTOM:
            if command.callback is not None:
                command.callback()

    def execute_all(self) -> None:
        """Run commands until the stack is empty."""
        while self.execute_next():
            pass

    def is_empty(self) -> bool:
        """Whether no command is waiting."""
        return not self._stack

    def destroy(self) -> None:
        """Release the window, the renderer and the flags; safe to call twice."""
        if self._destroyed:
            return
        self.instances.unregister(self.window)
        if self.initialized:
            self.renderer.cleanup()
            self.initialized = False
        self._stack.clear()
        self.flags.clear()
        self._destroyed = True

    def parse_flags_from_args(self, argv: Iterable[str] | None = None) -> None:
        """Apply ``--name=value`` arguments to the flags."""
        self.flags.parse_args(argv)

    def parse_flags_from_file(self, path: str | PathLike[str]) -> bool:
        """Apply a flags file; returns False if it could not be read."""
        try:
            self.flags.parse_file(path)
        except OSError:
            return False
        return True


def _as_color(data: Iterable[float]) -> tuple[float, float, float, float]:
    values = tuple(float(component) for component in data)
    if len(values) < 4:
        raise ValueError(f"a clear color needs four components, got {len(values)}")
    return values[0], values[1], values[2], values[3]