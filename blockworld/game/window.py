import logging
import math
import time

import pyglet
from pyglet.window import key, mouse

from blockworld.blocks import get_block_color, get_block_definition
from blockworld.constants import CHUNK_SIZE, TICKS_PER_SECOND
from blockworld.debug.profiler import RuntimeProfiler
from blockworld.gameplay.inventory import Inventory
from blockworld.graphics.block_renderer import ChunkRenderer
from blockworld.graphics.rendering import set_2d, set_3d
from blockworld.physics.player import PlayerBody, can_place, step
from blockworld.world.world import World


class GameWindow(pyglet.window.Window):
    LOADING_SLICE_SECONDS = 1.0 / 60.0
    MAX_PHYSICS_STEP = 1.0 / 60.0

    def __init__(
        self,
        seed: int = 90125,
        render_distance: int | None = None,
        rebuild_budget_ms: float | None = None,
        profile: bool = False,
    ) -> None:
        super().__init__(width=1280, height=720, caption="Block World", resizable=True)
        self.exclusive = False
        self.profile = profile
        self.profiler = RuntimeProfiler(enabled=profile)
        self.renderer = ChunkRenderer()
        self.world = World(
            seed=seed,
            render_distance=render_distance,
            rebuild_budget_ms=rebuild_budget_ms,
            consumer=self.renderer,
            profiler=self.profiler,
        )
        self.inventory = Inventory()

        spawn_y = float(self.world.spawn_height(0, 0))
        self.body = PlayerBody(position=(0.5, spawn_y, 0.5))
        self.rotation = (0.0, -20.0)

        self._loader = self.world.prime(self.body.position)
        self._loading = True
        self._load_progress = (0, 1)

        self.keys = key.KeyStateHandler()
        self.push_handlers(self.keys)
        pyglet.clock.schedule_interval(self.update, 1.0 / TICKS_PER_SECOND)

        self.ui_batch = pyglet.graphics.Batch()
        self.label = pyglet.text.Label(
            "",
            x=10,
            y=self.height - 10,
            anchor_x="left",
            anchor_y="top",
            color=(255, 255, 255, 255),
            batch=self.ui_batch,
        )
        self.hotbar_label = pyglet.text.Label(
            "",
            x=self.width // 2,
            y=30,
            anchor_x="center",
            anchor_y="bottom",
            color=(255, 255, 255, 255),
            batch=self.ui_batch,
        )
        self.swatch = pyglet.shapes.Rectangle(self.width // 2 - 12, 4, 24, 20, color=(255, 255, 255), batch=self.ui_batch)
        self.swatch.opacity = 0
        self.crosshair = pyglet.shapes.Line(
            self.width // 2 - 8, self.height // 2, self.width // 2 + 8, self.height // 2, color=(255, 255, 255), batch=self.ui_batch
        )
        self.crosshair2 = pyglet.shapes.Line(
            self.width // 2, self.height // 2 - 8, self.width // 2, self.height // 2 + 8, color=(255, 255, 255), batch=self.ui_batch
        )
        self._loading_label = pyglet.text.Label(
            "Generating World",
            x=self.width // 2,
            y=self.height // 2,
            anchor_x="center",
            anchor_y="center",
            font_size=28,
            color=(255, 255, 255, 255),
        )

    def set_exclusive_mouse(self, exclusive: bool) -> None:
        super().set_exclusive_mouse(exclusive)
        self.exclusive = exclusive

    def get_sight_vector(self) -> tuple[float, float, float]:
        yaw, pitch = self.rotation
        m = math.cos(math.radians(pitch))
        dy = math.sin(math.radians(pitch))
        dx = math.cos(math.radians(yaw - 90)) * m
        dz = math.sin(math.radians(yaw - 90)) * m
        return dx, dy, dz

    def get_motion_vector(self) -> tuple[float, float]:
        forward = int(self.keys[key.W]) - int(self.keys[key.S])
        right = int(self.keys[key.D]) - int(self.keys[key.A])
        if not forward and not right:
            return 0.0, 0.0

        yaw, _ = self.rotation
        forward_x = math.cos(math.radians(yaw - 90))
        forward_z = math.sin(math.radians(yaw - 90))
        right_x = -forward_z
        right_z = forward_x
        return forward * forward_x + right * right_x, forward * forward_z + right * right_z

    def _advance_loading(self) -> None:
        deadline = time.perf_counter() + self.LOADING_SLICE_SECONDS
        while time.perf_counter() < deadline:
            try:
                self._load_progress = next(self._loader)
            except StopIteration:
                self._loading = False
                logging.info("World ready")
                return
        done, total = self._load_progress
        phase = "Generating World" if done <= total // 2 else "Building Meshes"
        self._loading_label.text = f"{phase}... {int(done * 100 / total)}%"

    def update(self, dt: float) -> None:
        self.profiler.begin_frame("update")
        try:
            if self._loading:
                with self.profiler.section("update.loading"):
                    self._advance_loading()
                return

            dt = min(dt, 0.1)
            steps = max(1, int(math.ceil(dt / self.MAX_PHYSICS_STEP)))
            wish = self.get_motion_vector()
            jump = bool(self.keys[key.SPACE])
            with self.profiler.section("update.physics"):
                for _ in range(steps):
                    step(self.world.store, self.body, dt / steps, wish, jump)

            self.world.update(self.body.position)
            self._update_labels()
        finally:
            self.profiler.end_frame(self.world.diagnostics_snapshot())

    def _update_labels(self) -> None:
        x, y, z = self.body.position
        cx, cz = self.world.chunk_coords(x, z)
        diagnostics = self.world.diagnostics_snapshot()
        self.label.text = (
            f"XYZ: ({x:.1f}, {y:.1f}, {z:.1f})  Chunk: ({cx}, {cz})  "
            f"Chunks: {diagnostics['meshed_chunks']}  Draws: {self.renderer.draw_calls}  "
            f"Queued: {diagnostics['queued_rebuilds']}"
        )

        selected = self.inventory.selected_block()
        if selected is None:
            self.hotbar_label.text = "Break blocks to collect them!"
            self.swatch.opacity = 0
            return
        entries = []
        for index, block in enumerate(self.inventory.available(), start=1):
            entry = f"{index}:{get_block_definition(block).name} x{self.inventory.count(block)}"
            entries.append(f"[{entry}]" if block is selected else entry)
        self.hotbar_label.text = "  ".join(entries)
        r, g, b = get_block_color(selected)
        self.swatch.color = (int(r * 255), int(g * 255), int(b * 255))
        self.swatch.opacity = 255

    def on_mouse_press(self, x, y, button, modifiers):
        if self._loading:
            return
        if not self.exclusive:
            self.set_exclusive_mouse(True)
            return

        hit = self.world.cast(self.body.eye_position, self.get_sight_vector())
        if not hit.hit:
            return
        if button == mouse.LEFT:
            removed = self.world.get(*hit.position)
            if self.world.set(*hit.position, None):
                self.inventory.add(removed)
        elif button == mouse.RIGHT:
            target = hit.adjacent()
            if not can_place(self.world.store, self.body, target):
                return
            block = self.inventory.remove_selected()
            if block is not None and not self.world.set(*target, block):
                self.inventory.add(block)

    def on_mouse_scroll(self, x, y, scroll_x, scroll_y):
        if self._loading:
            return
        if scroll_y:
            self.inventory.cycle(-1 if scroll_y > 0 else 1)

    def on_mouse_motion(self, x, y, dx, dy):
        if self._loading or not self.exclusive:
            return
        sensitivity = 0.15
        yaw, pitch = self.rotation
        yaw += dx * sensitivity
        pitch = max(-90, min(90, pitch + dy * sensitivity))
        self.rotation = (yaw, pitch)

    def on_key_press(self, symbol, modifiers):
        if self._loading:
            return
        if symbol == key.ESCAPE:
            self.set_exclusive_mouse(False)
        elif key._1 <= symbol <= key._9:
            self.inventory.select_index(symbol - key._1)

    def on_resize(self, width, height):
        super().on_resize(width, height)
        self.label.y = height - 10
        self.hotbar_label.x = width // 2
        self.swatch.x = width // 2 - 12
        self.crosshair.x = width // 2 - 8
        self.crosshair.x2 = width // 2 + 8
        self.crosshair.y = self.crosshair.y2 = height // 2
        self.crosshair2.y = height // 2 - 8
        self.crosshair2.y2 = height // 2 + 8
        self.crosshair2.x = self.crosshair2.x2 = width // 2
        self._loading_label.x = width // 2
        self._loading_label.y = height // 2

    def on_draw(self):
        self.profiler.begin_frame("draw")
        try:
            self.clear()
            if self._loading:
                set_2d(self)
                self._loading_label.draw()
                return

            with self.profiler.section("draw.world"):
                far = (self.world.render_distance + 1) * CHUNK_SIZE * 1.5
                set_3d(self, self.rotation, self.body.eye_position, far=far)
                self.renderer.draw()
            with self.profiler.section("draw.ui"):
                set_2d(self)
                self.ui_batch.draw()
        finally:
            self.profiler.end_frame()

    def on_close(self):
        if self.profile:
            report_paths = self.profiler.write_report()
            if report_paths is not None:
                txt_path, json_path = report_paths
                logging.info(f"Wrote timing report: {txt_path}, {json_path}")
        self.renderer.delete()
        super().on_close()
