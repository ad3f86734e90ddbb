import pytest

from vmengine.engine import (
    FRAME_TIME_30FPS_NS,
    CommandType,
    NullRenderer,
    VirtualMachine,
)
from vmengine.instances import InstanceLimitError, InstanceRegistry


def make_vm(window="window", **kwargs):
    kwargs.setdefault("instances", InstanceRegistry())
    return VirtualMachine(window, renderer=NullRenderer(), **kwargs)


def test_default_flags_registered():
    vm = make_vm()
    assert vm.flags.get_bool("limitfps30") is False
    assert vm.flags.get_bool("vsync") is True
    assert vm.flags.get_bool("fullscreen") is False
    assert vm.flags.get_int("msaa") == 4
    assert vm.flags.get_int("resolution_width") == 1280
    assert vm.flags.get_int("resolution_height") == 720
    assert vm.flags.get_float("gamma") == 1.0
    assert vm.flags.get_string("renderer") == "vulkan"


def test_initial_state():
    vm = make_vm()
    assert vm.clear_color == (0.0, 0.0, 0.0, 1.0)
    assert vm.is_empty()
    assert len(vm) == 0
    assert vm.initialized is False


def test_window_is_registered():
    registry = InstanceRegistry()
    vm = make_vm("main", instances=registry)
    assert vm.window in registry


def test_second_engine_on_same_registry_raises():
    registry = InstanceRegistry()
    make_vm(object(), instances=registry)
    with pytest.raises(InstanceLimitError):
        make_vm(object(), instances=registry)


def test_commands_run_last_in_first_out():
    vm = make_vm()
    seen = []
    for name in ("a", "b", "c"):
        vm.push(CommandType.CUSTOM, callback=lambda n=name: seen.append(n))
    assert len(vm) == 3
    vm.execute_all()
    assert seen == ["c", "b", "a"]
    assert vm.is_empty()


def test_execute_next_on_empty_stack():
    vm = make_vm()
    assert vm.execute_next() is False


def test_push_beyond_capacity_is_dropped():
    vm = make_vm(capacity=2)
    assert vm.push(CommandType.UPDATE) is True
    assert vm.push(CommandType.UPDATE) is True
    assert vm.push(CommandType.UPDATE) is False
    assert len(vm) == 2


def test_render_before_init_draws_nothing():
    vm = make_vm()
    vm.push(CommandType.RENDER)
    vm.execute_all()
    assert vm.renderer.frames == 0


def test_init_then_render_draws_frame():
    vm = make_vm("screen")
    vm.push(CommandType.RENDER)
    vm.push(CommandType.INIT)
    vm.execute_all()
    assert vm.initialized is True
    assert vm.renderer.window == "screen"
    assert vm.renderer.frames == 1
    assert vm.renderer.last_clear_color == (0.0, 0.0, 0.0, 1.0)


def test_init_runs_only_once():
    vm = make_vm()
    vm.push(CommandType.INIT)
    vm.execute_next()
    vm.renderer.window = "changed"
    vm.push(CommandType.INIT)
    vm.execute_next()
    assert vm.renderer.window == "changed"


def test_clear_color_command_changes_drawn_color():
    vm = make_vm()
    vm.push(CommandType.RENDER)
    vm.push(CommandType.CLEAR_COLOR, data=(0.1, 0.2, 0.3, 0.4))
    vm.push(CommandType.INIT)
    vm.execute_all()
    assert vm.clear_color == (0.1, 0.2, 0.3, 0.4)
    assert vm.renderer.last_clear_color == (0.1, 0.2, 0.3, 0.4)


def test_clear_color_without_data_keeps_color():
    vm = make_vm()
    vm.push(CommandType.CLEAR_COLOR)
    vm.execute_all()
    assert vm.clear_color == (0.0, 0.0, 0.0, 1.0)


def test_clear_color_with_too_few_components():
    vm = make_vm()
    vm.push(CommandType.CLEAR_COLOR, data=(0.5, 0.5))
    with pytest.raises(ValueError):
        vm.execute_next()


def test_limitfps30_and_vsync_flags_applied_on_render():
    vm = make_vm()
    vm.flags.set_bool("limitfps30", True)
    vm.flags.set_bool("vsync", False)
    vm.push(CommandType.RENDER)
    vm.push(CommandType.INIT)
    vm.execute_all()
    assert vm.frame_time == 33333333 == FRAME_TIME_30FPS_NS
    assert vm.vsync_enabled is False

    vm.flags.set_bool("limitfps30", False)
    vm.flags.set_bool("vsync", True)
    vm.push(CommandType.RENDER)
    vm.execute_all()
    assert vm.frame_time == 0
    assert vm.vsync_enabled is True


def test_cleanup_command_destroys_engine():
    registry = InstanceRegistry()
    vm = make_vm("gone", instances=registry)
    vm.push(CommandType.UPDATE)
    vm.push(CommandType.CLEANUP)
    vm.push(CommandType.INIT)
    vm.execute_all()
    assert vm.destroyed is True
    assert vm.is_empty()
    assert "gone" not in registry
    assert len(vm.flags) == 0
    assert vm.renderer.active is False


def test_push_after_destroy_raises():
    vm = make_vm()
    vm.destroy()
    with pytest.raises(RuntimeError):
        vm.push(CommandType.UPDATE)


def test_destroy_twice_is_harmless():
    registry = InstanceRegistry()
    vm = make_vm(instances=registry)
    vm.destroy()
    vm.destroy()
    assert len(registry) == 0


def test_context_manager_releases_window():
    registry = InstanceRegistry()
    with make_vm("ctx", instances=registry) as vm:
        assert "ctx" in registry
    assert vm.destroyed is True
    assert len(registry) == 0


def test_parse_flags_from_args():
    vm = make_vm()
    vm.parse_flags_from_args(["prog", "--msaa=8", "--fullscreen"])
    assert vm.flags.get_int("msaa") == 8
    assert vm.flags.get_bool("fullscreen") is True


def test_parse_flags_from_file(tmp_path):
    path = tmp_path / "engine.cfg"
    path.write_text("# settings\ngamma = 2.5\nrenderer = software\n")
    vm = make_vm()
    assert vm.parse_flags_from_file(path) is True
    assert vm.flags.get_float("gamma") == 2.5
    assert vm.flags.get_string("renderer") == "software"


def test_parse_flags_from_missing_file(tmp_path):
    vm = make_vm()
    assert vm.parse_flags_from_file(tmp_path / "missing.cfg") is False
    assert vm.flags.get_float("gamma") == 1.0