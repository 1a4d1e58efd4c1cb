#!/usr/bin/env python3
"""
Relativity Simulator application entry point and UI/renderer coordination.

What this module does
- Loads and builds a scene file (see spacetime/scene_loader.py for the schema).
- Runs the tick loop inside a Pygame viewport: every frame it measures elapsed
  wall time, asks the SimulationController for a Snapshot and draws it centred
  on the observer.
- Optionally opens a Dear PyGui control panel (main thread) and/or a stdin
  command reader. Both only post commands to the CommandInbox the tick loop
  polls once per frame.

Threading model
- With the control panel the Pygame loop runs in a background thread and Dear
  PyGui owns the main thread. Without it (--no-panel) the Pygame loop runs on
  the main thread.
- The stdin reader (--stdin) is a daemon thread that blocks on input lines.

Running
1) Install dependencies: `pip install pygame dearpygui numpy`
2) Run: `python relativity_sim.py scenes/accelerate.json`
   Type commands such as `set-frame main` or `set-frame 1` when started with
   --stdin.

Viewport keys
- Esc: quit | Space: pause/play | M: main frame | 0-9: follow object | Wheel, +/-: zoom
"""

import argparse
import logging
import math
import sys
import threading
import time

import numpy as np
import pygame
import dearpygui.dearpygui as dpg

from spacetime.camera import Camera2D
from spacetime.commands import MAIN_FRAME_TARGET, Command, CommandInbox, start_stdin_reader
from spacetime.constants import (
    BACKGROUND_COLOR,
    FOCUS_COLOR,
    HUD_COLOR,
    SAFE_COORD_LIMIT,
    TARGET_FPS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from spacetime.data_models import Snapshot
from spacetime.errors import SceneError
from spacetime.logging_config import setup_logging
from spacetime.scene_loader import list_scenes, load_scene
from spacetime.simulation import SimulationController

logger = logging.getLogger("spacetime.app")

CLOCK_RADIUS = 14  # pixels

# ============================================================
# Pygame Renderer
# ============================================================


def unpack_rgb(color: int):
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


class PygameRenderer(threading.Thread):
    """
    Pygame loop: ticks the simulation and draws samples, clocks and HUD.
    """
    def __init__(self, sim: SimulationController, inbox: CommandInbox, fps: int = TARGET_FPS):
        super().__init__(daemon=True, name="tick-loop")
        self.sim = sim
        self.inbox = inbox
        self.fps = fps
        self.camera = Camera2D()
        self.surface = None
        self.clock = None
        self.running = True
        self.ticks = 0

    def run(self):
        pygame.init()
        pygame.display.set_caption(f"Relativity Simulator - {self.sim.scene.display_name}")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()

        last_time = time.perf_counter()
        try:
            while self.running:
                self.handle_events()
                if not self.running:
                    break

                now = time.perf_counter()
                real_dt = now - last_time
                last_time = now

                snapshot = self.sim.tick(real_dt)
                if snapshot is None:
                    logger.info("Simulation finished after %d ticks", self.ticks)
                    break
                self.ticks += 1

                self.draw(snapshot)
                self.clock.tick(self.fps)
        finally:
            self.running = False
            pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                self.camera.zoom(1.1 if event.y > 0 else 1.0 / 1.1)

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.inbox.post(Command("pause" if self.sim.status()["playing"] else "play"))
                elif event.key == pygame.K_m:
                    self.inbox.post(Command("set-frame", MAIN_FRAME_TARGET))
                elif pygame.K_0 <= event.key <= pygame.K_9:
                    self.inbox.post(Command("set-frame", event.key - pygame.K_0))
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self.camera.zoom(1.25)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    self.camera.zoom(1.0 / 1.25)

    def draw_samples(self, surf, snapshot: Snapshot):
        if snapshot.positions.shape[0] == 0:
            return
        w, h = surf.get_size()
        pts = self.camera.world_to_screen_many(snapshot.positions)
        size = self.camera.sample_size
        inside = (pts[:, 0] >= 0) & (pts[:, 0] < w) & (pts[:, 1] >= 0) & (pts[:, 1] < h)
        pts = pts[inside]
        colors = snapshot.colors[inside]
        if pts.shape[0] == 0:
            return

        if size == 1:
            unique, inverse = np.unique(colors, return_inverse=True)
            mapped = np.array([surf.map_rgb(unpack_rgb(int(c))) for c in unique], dtype=np.int64)
            pixels = pygame.surfarray.pixels2d(surf)
            pixels[pts[:, 0], pts[:, 1]] = mapped[inverse.ravel()]
            del pixels  # unlock the surface
        else:
            half = size // 2
            for (x, y), c in zip(pts, colors):
                surf.fill(unpack_rgb(int(c)), (int(x) - half, int(y) - half, size, size))

    def draw_clocks(self, surf, snapshot: Snapshot):
        for reading in snapshot.clocks:
            if reading.value is None or reading.position is None:
                continue
            sp = _safe_point(self.camera.world_to_screen(reading.position))
            if sp is None:
                continue
            rect = pygame.Rect(sp[0] - CLOCK_RADIUS, sp[1] - CLOCK_RADIUS, 2 * CLOCK_RADIUS, 2 * CLOCK_RADIUS)
            pygame.draw.circle(surf, HUD_COLOR, sp, CLOCK_RADIUS, 1)
            if reading.value > 0:
                start = math.pi / 2
                pygame.draw.arc(surf, FOCUS_COLOR, rect, start - 2 * math.pi * reading.value, start, 4)

    def draw(self, snapshot: Snapshot):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        self.camera.follow(snapshot.focus)
        self.draw_samples(surf, snapshot)
        self.draw_clocks(surf, snapshot)

        # Focus cross
        cx, cy = self.camera.world_to_screen(snapshot.focus)
        pygame.draw.line(surf, FOCUS_COLOR, (cx - 6, cy), (cx + 6, cy), 1)
        pygame.draw.line(surf, FOCUS_COLOR, (cx, cy - 6), (cx, cy + 6), 1)

        vx, vy = snapshot.observer_velocity
        draw_text(surf, "Esc: quit | Space: pause/play | M: main frame | 0-9: follow object | Wheel, +/-: zoom", 10, 10, HUD_COLOR)
        draw_text(surf, f"Following: {snapshot.observer_label}  stage {snapshot.stage}  v=({vx:.3f}, {vy:.3f})"
                        f"  t={snapshot.t:.3f}  [{'Paused' if snapshot.paused else 'Playing'}]", 10, 30, HUD_COLOR)
        y = 50
        for reading in snapshot.clocks:
            shown = "inactive" if reading.value is None else f"{reading.value:.3f}"
            draw_text(surf, f"Clock {reading.object_index} ({reading.mode.value}): {shown}", 10, y, HUD_COLOR)
            y += 20

        pygame.display.flip()


_cached_font = None


def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        _cached_font = pygame.font.SysFont("consolas", 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


def _safe_point(pt):
    x, y = int(pt[0]), int(pt[1])
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

# ============================================================
# Dear PyGui Control Panel
# ============================================================


class ControlPanel:
    """
    Dear PyGui window: frame selection, time scale and play/pause. Every action
    becomes a Command posted to the inbox.
    """
    def __init__(self, sim: SimulationController, inbox: CommandInbox, renderer: PygameRenderer):
        self.sim = sim
        self.inbox = inbox
        self.renderer = renderer
        self.status_msg_id = None
        self.state_text_id = None
        self._frame_items = [MAIN_FRAME_TARGET] + [f"{i}: {name}" for i, name in enumerate(sim.scene.names)]

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback (~10Hz at 60 FPS)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Relativity Simulator - Controls', width=420, height=260)

        with dpg.window(label="Controls", width=400, height=240, pos=(10, 10), tag="main_window"):
            dpg.add_text(f"Scene: {self.sim.scene.display_name}  (c = {self.sim.scene.c:g})")
            dpg.add_separator()
            with dpg.group(horizontal=True):
                dpg.add_text("Observer frame:")
                dpg.add_combo(self._frame_items, default_value=self._frame_items[self.sim.scene.follow_index + 1],
                              width=180, tag="frame_combo")
                dpg.add_button(label="Apply", callback=self._on_apply_frame)
            with dpg.group(horizontal=True):
                dpg.add_text("Time scale:")
                dpg.add_slider_float(min_value=0.01, max_value=10.0, default_value=self.sim.time_scale, width=220,
                                     callback=lambda s, a, u: self.inbox.post(Command("time-scale", max(float(a), 0.01))),
                                     tag="speed_slider")
            dpg.add_button(label="Play/Pause", callback=self._toggle_play)
            dpg.add_separator()
            self.state_text_id = dpg.add_text("")
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _on_apply_frame(self):
        choice = dpg.get_value("frame_combo")
        target = MAIN_FRAME_TARGET if choice == MAIN_FRAME_TARGET else int(choice.split(":", 1)[0])
        self.inbox.post(Command("set-frame", target))
        self._set_status(f"Requested frame: {choice}")

    def _toggle_play(self):
        playing = self.sim.status()["playing"]
        self.inbox.post(Command("pause" if playing else "play"))

    def _sync_ui_with_sim(self):
        if not self.renderer.is_alive():
            dpg.stop_dearpygui()
            return
        st = self.sim.status()
        vx, vy = st["velocity"]
        dpg.set_value(self.state_text_id,
                      f"Following {st['following']} | stage {st['stage']} | v=({vx:.3f}, {vy:.3f}) | t={st['t']:.3f}"
                      f" | {'Playing' if st['playing'] else 'Paused'}")
        if st["message"]:
            self._set_status(st["message"])
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Real-time special-relativity scene viewer.")
    parser.add_argument("scene", nargs="?", help="scene file path, or a file name inside scenes/")
    parser.add_argument("--no-panel", action="store_true", help="run without the Dear PyGui control panel")
    parser.add_argument("--stdin", action="store_true", help="read control commands from standard input")
    parser.add_argument("--fps", type=int, default=TARGET_FPS, help="frame rate cap")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    if not args.scene:
        print("Missing scene file argument. Available scenes:", file=sys.stderr)
        for fn, display in list_scenes():
            print(f"  {fn:28s} {display}", file=sys.stderr)
        return 1

    try:
        scene = load_scene(args.scene)
    except SceneError as e:
        logger.error("Cannot build scene: %s", e)
        return 2

    inbox = CommandInbox()
    sim = SimulationController(scene, inbox)
    if args.stdin:
        start_stdin_reader(inbox)

    renderer = PygameRenderer(sim, inbox, fps=args.fps)
    if args.no_panel:
        renderer.run()
        return 0

    renderer.start()
    ControlPanel(sim, inbox, renderer)
    try:
        dpg.start_dearpygui()
    finally:
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
