# vmengine

The core of a small rendering engine. The engine runs a stack of commands. The package has four modules:

- **`vmengine.flags`**: a `FlagRegistry` of typed runtime flags (bool, int, float, string), each with a default value. Flags can be set from command-line style arguments (`--name=value`, `--name`) or from `name = value` configuration files.
- **`vmengine.instances`**: an `InstanceRegistry`, a thread-safe guard that limits how many windows may be registered at once. The limit is one by default.
- **`vmengine.engine`**: a `VirtualMachine` that pushes `Command`s onto a bounded stack and runs them last-in, first-out. It draws through a pluggable `Renderer`.
- **`vmengine.jobs`**: a first-in, first-out `JobQueue` of render, data and custom jobs.

## Installation

```
pip install .
```

To include the test dependencies, use `pip install ".[test]"`.

## Flags

```python
from vmengine.flags import FlagRegistry

flags = FlagRegistry()
flags.register_bool("vsync", True)
flags.register_int("msaa", 4)

flags.parse_args(["prog", "--vsync=false", "--msaa=8"])
assert flags.get_bool("vsync") is False
assert flags.get_int("msaa") == 8

flags.reset_all()
assert flags.get_int("msaa") == 4
```

- A registry holds at most 64 flags. Names longer than 31 characters are cut to 31.
- Registering a name that is already taken raises `FlagError`. So does registering past the limit.
- `set_bool`, `set_int`, `set_float` and `set_string` raise `FlagError` if the flag is missing or holds another type. `reset` also raises `FlagError` for a missing flag.
- `get_bool`, `get_int`, `get_float` and `get_string` do not raise. For a missing flag, or one of another type, they return `False`, `0`, `0.0` or `None`.
- In `parse_args`, the first element is taken to be the program name and is skipped. Unknown flags are ignored. A bare `--name` sets a boolean flag to `True`.
- A boolean flag accepts `true`, `1`, `false` or `0`. Any other text leaves its value unchanged.
- Integer and float values are read from the start of the text. When the text does not start with a number, the value becomes 0.

A configuration file has one `name = value` pair per line. The parser skips empty lines, lines that start with `#`, lines without `=`, and unknown names:

```
# display settings
vsync = true
gamma = 2.2
```

```python
flags.parse_file("engine.cfg")   # raises OSError if the file cannot be read
```

## Running commands

```python
from vmengine.engine import CommandType, VirtualMachine

vm = VirtualMachine(window="main")
vm.push(CommandType.RENDER)
vm.push(CommandType.CLEAR_COLOR, (0.1, 0.2, 0.3, 1.0))
vm.push(CommandType.INIT)
vm.execute_all()   # runs INIT, then CLEAR_COLOR, then RENDER
vm.destroy()
```

Each command type does the following:

- `INIT` calls the renderer's `init` once.
- `RENDER` draws only after `INIT` has run. Before drawing it reads the `limitfps30` and `vsync` flags into `frame_time` and `vsync_enabled`.
- `CLEAR_COLOR` takes four components.
- `CUSTOM` calls its callback.
- `UPDATE` does nothing.
- `CLEANUP` destroys the machine.

The stack holds 256 commands by default. When it is full, `push` returns `False` and drops the command.

When a `VirtualMachine` is created, it registers the default engine flags in its registry, unless they are already there:

- `limitfps30`
- `vsync`
- `fullscreen`
- `msaa`
- `resolution_width`
- `resolution_height`
- `gamma`
- `renderer`

A `VirtualMachine` also registers its window with an `InstanceRegistry`. Unless you pass a registry of your own, it uses the module-level `shared_registry`. Creating a second machine with a window while another window is registered raises `InstanceLimitError`. The registry is checked again before every command runs.

`destroy` does the following:

- unregisters the window;
- cleans up the renderer;
- empties the stack;
- removes all flags.

A machine is also a context manager: leaving the `with` block calls `destroy`.

`parse_flags_from_args` passes arguments to the flag registry. `parse_flags_from_file` reads a flags file and returns `False` if the file cannot be read.

## Jobs

```python
from vmengine.jobs import JobQueue, custom_job

seen = []
queue = JobQueue()
queue.add(custom_job("payload", seen.append))
queue.wait_completion()
assert seen == ["payload"]
assert queue.is_empty()
```

There are three kinds of job:

- `render_job(vm)` pushes a `RENDER` command and runs it.
- `data_job(vm, output)` copies a snapshot of the machine into the mapping `output`. The snapshot holds `window`, `initialized`, `clear_color`, `frame_time`, `vsync_enabled` and `stack_size`.
- `custom_job(data, callback)` calls `callback(data)`.

The queue's methods:

- `process` runs queued jobs in order and removes each finished job.
- `release` removes a job without running it.
- `shutdown` drops every queued job.

## What this package does not do

The package draws nothing on screen. `NullRenderer` is the only renderer included. It records the window and counts frames, but it produces no graphics. To draw for real, pass your own object with `init(window)`, `draw(clear_color)` and `cleanup()` as `VirtualMachine(renderer=...)`.

The package has no command-line program.

## Running the tests

```
pytest
```