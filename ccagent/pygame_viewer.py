# ccagent/pygame_viewer.py (autopilot + knowledge fog)
from __future__ import annotations
import argparse
from dataclasses import dataclass
from typing import List, Optional
import logging
import os
import pygame

from .agent import PlanningAgent
from .grid import ChipWorld
from .heuristics import step
from .types import Action, Coord, TileStatus
from .viz import tile_color

logger = logging.getLogger(__name__)


@dataclass
class Colors:
    BG = (18, 18, 22)
    PLAYER = (220, 90, 90)
    PLAN = (70, 170, 110)
    GRID = (60, 60, 70)


class Viewer:
    def __init__(self, world: ChipWorld, cell_size: int = 28, fps: int = 60,
                 fullscreen: bool = False, speed: float = 6.0, env_dir: Optional[str] = None):
        self.world = world
        self.cell = cell_size
        self.fps = fps
        self.speed_ticks_per_sec = speed
        self.env_dir = env_dir
        self.env_files: List[str] = []
        self.env_index = -1

        self.autopilot = False
        self.show_grid = False
        self.show_fog = True
        self.fog_alpha = 200
        self._step_timer = 0.0
        self.last_action = Action.NOOP

        self.fullscreen = fullscreen
        self._recreate_display()
        self.clock = pygame.time.Clock()
        self._reset_state()

        if self.env_dir and os.path.isdir(self.env_dir):
            self.env_files = sorted(f for f in os.listdir(self.env_dir) if f.endswith(".txt"))

    # ----------------- display -----------------
    def _recreate_display(self) -> None:
        W, H = self.world.cols * self.cell, self.world.rows * self.cell
        flags = pygame.SCALED | (pygame.FULLSCREEN if self.fullscreen else 0)
        self.screen = pygame.display.set_mode((W, H), flags)

    def toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen
        self._recreate_display()

    def _caption(self) -> None:
        state = "DONE" if self.world.reached else ("auto" if self.autopilot else "paused")
        pygame.display.set_caption(
            f"ccagent [{state}] chips={self.world.remaining_chips()} "
            f"keys={len(self.world.holdings)} last={self.last_action.value}")

    # ----------------- agent -----------------
    def _reset_state(self) -> None:
        self.world.reset()
        self.agent = PlanningAgent(self.world)
        self.last_action = Action.NOOP

    def _load_env_by_index(self, index: int) -> None:
        if not self.env_files or not (0 <= index < len(self.env_files)):
            return
        self.env_index = index
        filepath = os.path.join(self.env_dir, self.env_files[self.env_index])
        logger.info("loading %s", filepath)
        self.world = ChipWorld.load(filepath, reveal=self.world.reveal)
        self._recreate_display()
        self._reset_state()

    def _tick(self) -> None:
        if self.world.reached:
            return
        self.last_action = self.agent.get_action()
        self.world.apply(self.last_action)

    def _planned_cells(self) -> List[Coord]:
        cells, cur = [], self.world.pos
        for a in reversed(self.agent.plan):
            cur = step(cur, a)
            cells.append(cur)
        return cells

    # ----------------- draw -----------------
    def draw(self) -> None:
        cell = self.cell
        scr = self.screen
        scr.fill(Colors.BG)

        for (r, c), status in self.world.grid.items():
            rect = pygame.Rect(c * cell, r * cell, cell, cell)
            if status.is_key:
                scr.fill(tile_color(TileStatus.BLANK), rect)
                pygame.draw.circle(scr, tile_color(status), rect.center, cell // 3)
            else:
                scr.fill(tile_color(status), rect)

        for (r, c) in self._planned_cells():
            rect = pygame.Rect(c * cell + cell // 4, r * cell + cell // 4, cell // 2, cell // 2)
            pygame.draw.rect(scr, Colors.PLAN, rect, border_radius=4)

        pr, pc = self.world.pos
        player_rect = pygame.Rect(pc * cell + 6, pr * cell + 6, cell - 12, cell - 12)
        pygame.draw.rect(scr, Colors.PLAYER, player_rect, border_radius=8)

        # fog over everything the agent has not recorded yet
        if self.show_fog:
            fog = pygame.Surface((self.world.cols * cell, self.world.rows * cell), pygame.SRCALPHA)
            known = self.agent.kb.tiles
            for s in self.world.grid:
                if s not in known and s not in self.agent.kb.visited:
                    fog.fill((0, 0, 0, self.fog_alpha), pygame.Rect(s[1] * cell, s[0] * cell, cell, cell))
            scr.blit(fog, (0, 0))

        if self.show_grid:
            W, H = self.world.cols * cell, self.world.rows * cell
            for c in range(self.world.cols + 1):
                pygame.draw.line(scr, Colors.GRID, (c * cell, 0), (c * cell, H))
            for r in range(self.world.rows + 1):
                pygame.draw.line(scr, Colors.GRID, (0, r * cell), (W, r * cell))

        self._caption()
        pygame.display.flip()

    # ----------------- loop -----------------
    def run(self) -> None:
        running = True
        while running:
            dt = self.clock.tick(self.fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        self.autopilot = not self.autopilot
                    elif event.key == pygame.K_n:
                        self._tick()
                    elif event.key == pygame.K_r:
                        self._reset_state()
                    elif event.key == pygame.K_LEFTBRACKET and self.env_files:
                        self._load_env_by_index((self.env_index - 1 + len(self.env_files)) % len(self.env_files))
                    elif event.key == pygame.K_RIGHTBRACKET and self.env_files:
                        self._load_env_by_index((self.env_index + 1) % len(self.env_files))
                    elif event.key == pygame.K_PAGEUP:
                        self.speed_ticks_per_sec = min(self.speed_ticks_per_sec + 1, 60)
                    elif event.key == pygame.K_PAGEDOWN:
                        self.speed_ticks_per_sec = max(self.speed_ticks_per_sec - 1, 1)
                    elif event.key == pygame.K_f:
                        self.show_fog = not self.show_fog
                    elif event.key == pygame.K_h:
                        self.show_grid = not self.show_grid
                    elif event.key == pygame.K_F11:
                        self.toggle_fullscreen()

            if self.autopilot and not self.world.reached:
                self._step_timer += dt
                interval = 1.0 / self.speed_ticks_per_sec
                while self._step_timer >= interval and not self.world.reached:
                    self._tick()
                    self._step_timer -= interval

            self.draw()


def main():
    parser = argparse.ArgumentParser(description="ccagent viewer: watch the planning agent play a map")
    parser.add_argument("--load", type=str, default=None, help="Load a map (.txt)")
    parser.add_argument("--envdir", type=str, default="envs", help="Directory of maps to cycle through with [ and ]")
    parser.add_argument("--cell", type=int, default=28, help="Cell size in pixels")
    parser.add_argument("--fps", type=int, default=60, help="Frames per second")
    parser.add_argument("--speed", type=float, default=6.0, help="Autopilot speed in ticks/sec")
    parser.add_argument("--hidden", action="store_true", help="Withhold the full map from the agent")
    parser.add_argument("--fullscreen", action="store_true", help="Start in fullscreen (toggle F11)")
    args = parser.parse_args()

    if args.load:
        world = ChipWorld.load(args.load, reveal=not args.hidden)
    elif os.path.isdir(args.envdir) and any(f.endswith(".txt") for f in os.listdir(args.envdir)):
        first_env = sorted(f for f in os.listdir(args.envdir) if f.endswith(".txt"))[0]
        world = ChipWorld.load(os.path.join(args.envdir, first_env), reveal=not args.hidden)
    else:
        parser.error("no map given: use --load FILE or --envdir DIR")

    pygame.init()
    try:
        Viewer(world, cell_size=args.cell, fps=args.fps, fullscreen=args.fullscreen,
               speed=args.speed, env_dir=args.envdir).run()
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
