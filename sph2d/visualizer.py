"""
Interactive pygame viewer for the 2D SPH solvers.

The viewer repeatedly advances the solver and draws the particle
positions. View space (origin bottom-left, +y up) is stretched onto the
window (origin top-left, +y down).

Controls: SPACE pauses, I toggles the info overlay, ESC or closing the
window quits.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pygame
import pygame.gfxdraw

logger = logging.getLogger(__name__)

BACKGROUND = (230, 230, 230)
PARTICLE_COLOR = (51, 102, 230)
TEXT_COLOR = (20, 20, 20)


def world_to_screen(positions: np.ndarray, view_size: Tuple[float, float],
                    window_size: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
    """Map (n, 2) view-space positions to integer pixel coordinates.

    Args:
        positions: Particle positions in view units
        view_size: (view_width, view_height)
        window_size: (width, height) in pixels

    Returns:
        (screen_x, screen_y) int arrays; y is flipped so +y points up
    """
    scale_x = window_size[0] / view_size[0]
    scale_y = window_size[1] / view_size[1]
    screen_x = np.floor(positions[:, 0] * scale_x).astype(int)
    screen_y = np.floor(window_size[1] - positions[:, 1] * scale_y).astype(int)
    return screen_x, screen_y


@dataclass
class RenderContext:
    """Everything the render loop touches; one per window."""
    solver: object
    screen: pygame.Surface
    clock: pygame.time.Clock
    target_fps: int = 60
    paused: bool = False
    running: bool = True
    show_info: bool = True
    frame_times: List[float] = field(default_factory=list)

    @property
    def fps(self) -> float:
        return 1.0 / np.mean(self.frame_times) if self.frame_times else 0.0


class SPHVisualizer:
    """Window that drives a solver and draws its particles."""

    def __init__(self, solver, target_fps: int = 60, caption: str = "SPH 2D"):
        """
        Args:
            solver: SphSolver or ViscoelasticSolver
            target_fps: Frame rate cap
            caption: Window title
        """
        pygame.init()
        screen = pygame.display.set_mode(solver.window_size)
        pygame.display.set_caption(caption)
        self.font = pygame.font.Font(None, 20)
        self.context = RenderContext(
            solver=solver,
            screen=screen,
            clock=pygame.time.Clock(),
            target_fps=target_fps,
        )

    def run(self, max_frames: Optional[int] = None) -> int:
        """Main loop. Returns the number of solver updates performed."""
        ctx = self.context
        updates = 0
        while ctx.running:
            frame_start = time.perf_counter()

            self.handle_events()
            if not ctx.running:
                break

            if not ctx.paused:
                ctx.solver.update()
                updates += 1

            self.render()

            ctx.frame_times.append(time.perf_counter() - frame_start)
            if len(ctx.frame_times) > 60:
                ctx.frame_times.pop(0)

            ctx.clock.tick(ctx.target_fps)
            if max_frames is not None and updates >= max_frames:
                ctx.running = False

        pygame.quit()
        logger.info("Viewer closed after %d updates", updates)
        return updates

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.context.running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_keydown(event)

    def handle_keydown(self, event):
        ctx = self.context
        if event.key == pygame.K_SPACE:
            ctx.paused = not ctx.paused
        elif event.key == pygame.K_i:
            ctx.show_info = not ctx.show_info
        elif event.key == pygame.K_ESCAPE:
            ctx.running = False

    def render(self):
        ctx = self.context
        ctx.screen.fill(BACKGROUND)
        self.render_particles()
        if ctx.show_info:
            self.render_info()
        pygame.display.flip()

    def render_particles(self):
        solver = self.context.solver
        width, height = solver.window_size
        screen_x, screen_y = world_to_screen(
            solver.get_positions(), (solver.view_width, solver.view_height), (width, height)
        )
        # point_size is a diameter in pixels
        radius = max(1, int(round(solver.point_size / 2.0)))
        visible = (screen_x >= 0) & (screen_x < width) & (screen_y >= 0) & (screen_y < height)
        for x, y in zip(screen_x[visible], screen_y[visible]):
            pygame.gfxdraw.filled_circle(self.context.screen, int(x), int(y), radius, PARTICLE_COLOR)

    def render_info(self):
        ctx = self.context
        lines = [
            f"FPS: {ctx.fps:.1f}",
            f"Frame: {ctx.solver.frame}",
            f"Particles: {ctx.solver.number_of_particles}",
            f"Backend: {ctx.solver.backend.value}",
            "PAUSED" if ctx.paused else "",
        ]
        y = 10
        for line in lines:
            if line:
                text = self.font.render(line, True, TEXT_COLOR)
                ctx.screen.blit(text, (10, y))
            y += 18
