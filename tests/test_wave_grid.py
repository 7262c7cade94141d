"""Tests for the WaveGrid engine."""

from __future__ import annotations

import numpy as np
import pytest

from wavegrid.config.settings import EngineConfig
from wavegrid.core.events import (
    EventBus,
    EventType,
    Viewport,
    pointer_enter_event,
    pointer_leave_event,
    pointer_move_event,
    resize_event,
    theme_event,
)
from wavegrid.core.state import State
from wavegrid.engine.wave_grid import WaveGrid
from wavegrid.graphics.surface import BufferSurface, RecordingSurface
from wavegrid.noise.simplex import SimplexNoise, ZeroNoise

from conftest import ManualScheduler


@pytest.fixture()
def engine(
    flat_config: EngineConfig, zero_noise: ZeroNoise, scheduler: ManualScheduler, event_bus: EventBus
) -> WaveGrid:
    return WaveGrid(flat_config, noise=zero_noise, scheduler=scheduler, event_bus=event_bus)


class TestLifecycle:
    def test_init_builds_grid_and_starts(
        self, engine: WaveGrid, surface: RecordingSurface, scheduler: ManualScheduler
    ) -> None:
        engine.init(surface)
        assert engine.state.state == State.RUNNING
        assert engine.grid is not None
        assert (engine.grid.cols, engine.grid.rows) == (80, 60)
        assert engine.is_running
        assert len(scheduler.frames) == 1

    def test_init_without_scheduler_is_stopped(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=ZeroNoise())
        engine.init(RecordingSurface(100, 100))
        assert engine.state.state == State.STOPPED
        assert not engine.is_running

    def test_init_twice_is_ignored(self, engine: WaveGrid, surface: RecordingSurface) -> None:
        engine.init(surface)
        first = engine.grid
        engine.init(RecordingSurface(10, 10))
        assert engine.grid is first
        assert engine.surface is surface

    def test_frames_draw_through_the_scheduler(
        self, engine: WaveGrid, surface: RecordingSurface, scheduler: ManualScheduler
    ) -> None:
        engine.init(surface)
        scheduler.run_frame(0.0)
        scheduler.run_frame(16.0)
        assert surface.count("fill") == 2
        assert surface.count("stroke") == 2 * engine.grid.rows
        assert engine.clock.frame == 2

    def test_stop_and_start(
        self, engine: WaveGrid, surface: RecordingSurface, scheduler: ManualScheduler
    ) -> None:
        engine.init(surface)
        engine.stop()
        assert engine.state.state == State.STOPPED
        assert scheduler.run_frame(10.0) == 0

        engine.start()
        engine.start()
        assert engine.state.state == State.RUNNING
        assert len(scheduler.frames) == 1

    def test_destroy_releases_everything(
        self,
        engine: WaveGrid,
        surface: RecordingSurface,
        scheduler: ManualScheduler,
        event_bus: EventBus,
    ) -> None:
        engine.init(surface)
        assert event_bus.handler_count() == 5

        engine.on_resize(Viewport(200, 200))
        engine.destroy()

        assert engine.state.is_destroyed
        assert engine.surface is None
        assert event_bus.handler_count() == 0
        assert not scheduler.frames
        assert not scheduler.timers

    def test_calls_after_destroy_are_no_ops(self, engine: WaveGrid, surface: RecordingSurface) -> None:
        engine.init(surface)
        engine.destroy()
        surface.clear()

        assert engine.update(16.0) is None
        engine.draw()
        engine.frame(16.0)
        engine.start()
        engine.destroy()
        assert surface.calls == []
        assert engine.state.is_destroyed

    def test_update_before_init_is_no_op(self, engine: WaveGrid) -> None:
        assert engine.update(16.0) is None


class TestFramePass:
    def test_zero_noise_no_pointer_stays_at_base(self) -> None:
        config = EngineConfig(spacing_x=10, spacing_y=10, pad=0, centered=False)
        engine = WaveGrid(config, noise=ZeroNoise())
        engine.init(RecordingSurface(30, 20))
        grid = engine.update(16.0)

        assert (grid.rows, grid.cols) == (2, 3)
        np.testing.assert_array_equal(grid.current_x, grid.base_x)
        np.testing.assert_array_equal(grid.current_y, grid.base_y)

    def test_current_is_base_plus_rest_plus_spring(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=SimplexNoise(seed=21))
        engine.init(RecordingSurface(100, 100))
        grid = engine.grid
        grid.spring_offset_y[:] = 3.0

        engine.update(16.0)
        dx, dy = engine.displacement.rest_offsets(
            grid.base_x, grid.base_y, engine.clock.time, engine.energy
        )
        np.testing.assert_allclose(grid.current_x, grid.base_x + dx + grid.spring_offset_x)
        np.testing.assert_allclose(grid.current_y, grid.base_y + dy + grid.spring_offset_y)

    def test_base_positions_never_change(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=SimplexNoise(seed=1), energy_source=lambda: 1.0)
        engine.init(RecordingSurface(100, 100))
        before_x = engine.grid.base_x.copy()
        before_y = engine.grid.base_y.copy()
        engine.spring.on_pointer_move(10, 10)
        engine.spring.on_pointer_move(30, 20)
        for _ in range(20):
            engine.frame(16.0)
        np.testing.assert_array_equal(engine.grid.base_x, before_x)
        np.testing.assert_array_equal(engine.grid.base_y, before_y)

    def test_clock_advances_faster_with_energy(self, flat_config: EngineConfig) -> None:
        quiet = WaveGrid(flat_config, noise=ZeroNoise())
        loud = WaveGrid(flat_config, noise=ZeroNoise(), energy_source=lambda: 1.0)
        for engine in (quiet, loud):
            engine.init(RecordingSurface(50, 50))
            for _ in range(30):
                engine.update(16.0)
        assert loud.clock.time > quiet.clock.time

    def test_energy_is_smoothed(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=ZeroNoise(), energy_source=lambda: 1.0)
        engine.init(RecordingSurface(50, 50))
        engine.update(16.0)
        assert engine.energy == pytest.approx(flat_config.audio_smoothing)

    def test_failing_energy_source_reads_silence(self, flat_config: EngineConfig) -> None:
        def broken() -> float:
            raise OSError("no audio device")

        engine = WaveGrid(flat_config, noise=ZeroNoise(), energy_source=broken)
        engine.init(RecordingSurface(50, 50))
        engine.update(16.0)
        assert engine.energy == 0.0

    def test_non_finite_elapsed_is_absorbed(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=SimplexNoise(seed=4))
        engine.init(RecordingSurface(50, 50))
        grid = engine.update(float("nan"))
        assert np.all(np.isfinite(grid.current_y))
        assert engine.clock.time == 0.0

    def test_long_gap_is_clamped_without_a_scheduler(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=ZeroNoise())
        engine.init(RecordingSurface(50, 50))
        engine.update(16.0)
        before = engine.clock.elapsed_ms
        engine.update(60_000.0)
        assert engine.clock.elapsed_ms - before == flat_config.max_frame_ms

    def test_pointer_moves_nearby_points(
        self, engine: WaveGrid, surface: RecordingSurface, event_bus: EventBus
    ) -> None:
        engine.init(surface)
        event_bus.emit(pointer_enter_event(100.0, 100.0))
        event_bus.emit(pointer_move_event(105.0, 100.0))
        for _ in range(3):
            engine.update(16.0)
        grid = engine.grid
        moved = np.abs(grid.current_x - grid.base_x) > 1e-6
        assert moved.any()
        assert not moved[np.hypot(grid.base_x - 105.0, grid.base_y - 100.0) > 200].any()

    def test_spring_settles_after_pointer_leaves(
        self, engine: WaveGrid, surface: RecordingSurface, event_bus: EventBus
    ) -> None:
        engine.init(surface)
        event_bus.emit(pointer_move_event(100.0, 100.0))
        event_bus.emit(pointer_move_event(110.0, 100.0))
        engine.update(16.0)
        assert not engine.spring.is_settled(engine.grid)

        event_bus.emit(pointer_leave_event())
        for _ in range(1500):
            engine.update(1000.0 / 60.0)
        assert engine.spring.is_settled(engine.grid)


class TestResize:
    def test_resize_is_debounced(
        self, engine: WaveGrid, surface: RecordingSurface, scheduler: ManualScheduler
    ) -> None:
        config = EngineConfig(spacing_x=40, spacing_y=40, pad=0)
        engine.set_config(config)
        engine.init(RecordingSurface(800, 600), Viewport(800, 600))
        first = engine.grid
        assert (first.cols, first.rows) == (20, 15)

        for w, h in ((700, 500), (500, 400), (400, 300)):
            engine.on_resize(Viewport(w, h))
        assert engine.grid is first

        scheduler.advance(100.0)
        second = engine.grid
        assert second is not first
        assert (second.cols, second.rows) == (10, 8)
        assert second.spring_offset_x is not first.spring_offset_x
        assert engine.viewport == Viewport(400, 300)

    def test_resize_event_resizes_surface(
        self, engine: WaveGrid, scheduler: ManualScheduler, event_bus: EventBus
    ) -> None:
        surface = BufferSurface(100, 100)
        engine.init(surface)
        event_bus.emit(resize_event(Viewport(50, 40, 2.0)))
        scheduler.advance(100.0)
        assert surface.buffer.shape == (80, 100, 3)
        assert engine.grid.cols == 5

    def test_resize_without_scheduler_is_immediate(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config, noise=ZeroNoise())
        engine.init(RecordingSurface(100, 100))
        engine.on_resize(Viewport(50, 50))
        assert engine.grid.cols == 5

    def test_resize_never_runs_inside_a_frame(
        self, engine: WaveGrid, surface: RecordingSurface, scheduler: ManualScheduler
    ) -> None:
        engine.init(surface)
        first = engine.grid
        engine.on_resize(Viewport(100, 100))
        scheduler.run_frame(0.0)
        scheduler.run_frame(16.0)
        assert engine.grid is first


class TestThemeAndConfig:
    def test_set_theme(self, engine: WaveGrid, surface: RecordingSurface) -> None:
        engine.init(surface)
        assert engine.set_theme("classicfm").name == "classicfm"
        engine.draw()
        assert surface.calls[0] == ("fill", engine.theme.background_rgba)
        assert engine.theme.background_rgba == (26, 0, 0, 1.0)

    def test_unknown_theme_falls_back(self, engine: WaveGrid) -> None:
        assert engine.set_theme("vaporwave").name == "default"

    def test_theme_event(self, engine: WaveGrid, surface: RecordingSurface, event_bus: EventBus) -> None:
        engine.init(surface)
        event_bus.emit(theme_event("reprezent"))
        assert engine.theme.name == "reprezent"

    def test_events_ignored_after_destroy(
        self, engine: WaveGrid, surface: RecordingSurface, event_bus: EventBus
    ) -> None:
        engine.init(surface)
        engine.destroy()
        event_bus.emit(theme_event("reprezent"))
        event_bus.emit(pointer_move_event(1.0, 1.0))
        assert engine.theme.name == "default"
        assert not engine.spring.pointer.active

    def test_layout_change_rebuilds_grid(self, engine: WaveGrid, surface: RecordingSurface) -> None:
        engine.init(surface)
        first = engine.grid
        engine.set_config(engine.config.replace(spacing_x=20.0))
        assert engine.grid is not first
        assert engine.grid.cols == 40

    def test_other_changes_keep_grid(self, engine: WaveGrid, surface: RecordingSurface) -> None:
        engine.init(surface)
        first = engine.grid
        engine.set_config(engine.config.replace(amplitude=5.0, curve_mode="line"))
        assert engine.grid is first
        assert engine.displacement.config.amplitude == 5.0
        assert engine.renderer.curve_mode == "line"

    def test_seed_change_replaces_noise(self, flat_config: EngineConfig) -> None:
        engine = WaveGrid(flat_config.replace(seed=1))
        engine.set_config(engine.config.replace(seed=2))
        assert engine.noise.seed == 2
        assert engine.displacement.noise is engine.noise

    def test_independent_instances(self, flat_config: EngineConfig) -> None:
        a = WaveGrid(flat_config, noise=ZeroNoise())
        b = WaveGrid(flat_config, noise=ZeroNoise())
        a.init(RecordingSurface(100, 100))
        b.init(RecordingSurface(100, 100))
        a.spring.on_pointer_move(1.0, 1.0)
        assert not b.spring.pointer.active
        assert a.grid is not b.grid

    def test_tick_event_after_draw(
        self, engine: WaveGrid, surface: RecordingSurface, event_bus: EventBus
    ) -> None:
        ticks: list = []
        event_bus.subscribe(EventType.TICK, ticks.append)
        engine.init(surface)
        engine.frame(16.0)
        assert len(ticks) == 1
        assert ticks[0].data["delta"] == 16.0

    def test_config_swap_is_announced(
        self, engine: WaveGrid, surface: RecordingSurface, event_bus: EventBus
    ) -> None:
        swaps: list = []
        event_bus.subscribe(EventType.CONFIG_CHANGED, swaps.append)
        engine.init(surface)
        new = engine.config.replace(amplitude=7.0)
        engine.set_config(new)
        engine.set_config(new)
        assert len(swaps) == 1
        assert swaps[0].data["config"] is new
