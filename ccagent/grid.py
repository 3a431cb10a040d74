# ccagent/grid.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import os

from .heuristics import grid_neighbors, step
from .passability import is_passable, key_color
from .types import Action, Coord, TileStatus

ROBOT_CHAR = "@"
CHAR_TO_STATUS: Dict[str, TileStatus] = {s.value: s for s in TileStatus}


class WorldFormatError(ValueError):
    pass


@dataclass
class ChipWorld:
    """
    Small in-process simulator answering the agent's environment queries.
    With reveal=False the full map, item positions and goal are withheld.
    """
    rows: int
    cols: int
    grid: Dict[Coord, TileStatus]
    start: Coord
    reveal: bool = True
    pos: Coord = (0, 0)
    holdings: List[str] = field(default_factory=list)
    reached: bool = False

    def __post_init__(self):
        self.pos = self.start
        self._initial = dict(self.grid)

    @staticmethod
    def parse(text: str, reveal: bool = True) -> "ChipWorld":
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if not lines:
            raise WorldFormatError("empty map")

        header = lines[0].split()
        if header[0] == "WORLD":
            if len(header) != 3:
                raise WorldFormatError(f"bad header: {lines[0]!r}")
            try:
                rows, cols = int(header[1]), int(header[2])
            except ValueError:
                raise WorldFormatError(f"bad header: {lines[0]!r}") from None
            body = lines[1:]
            if len(body) != rows:
                raise WorldFormatError(f"expected {rows} rows, got {len(body)}")
        else:
            # headerless: every line is a row
            body = lines
            rows, cols = len(body), len(body[0])

        grid: Dict[Coord, TileStatus] = {}
        start: Optional[Coord] = None
        for r, row in enumerate(body):
            if len(row) != cols:
                raise WorldFormatError(f"row {r} has {len(row)} cells, expected {cols}")
            for c, ch in enumerate(row):
                if ch == ROBOT_CHAR:
                    if start is not None:
                        raise WorldFormatError("more than one robot start")
                    start = (r, c)
                    grid[(r, c)] = TileStatus.BLANK
                elif ch in CHAR_TO_STATUS:
                    grid[(r, c)] = CHAR_TO_STATUS[ch]
                else:
                    raise WorldFormatError(f"unknown tile {ch!r} at {(r, c)}")
        if start is None:
            raise WorldFormatError("map has no robot start '@'")
        return ChipWorld(rows, cols, grid, start, reveal=reveal)

    @staticmethod
    def load(path: str, reveal: bool = True) -> "ChipWorld":
        with open(path, "r") as f:
            return ChipWorld.parse(f.read(), reveal=reveal)

    def save(self, path: str) -> None:
        if os.path.dirname(path):
            os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(f"WORLD {self.rows} {self.cols}\n")
            f.write(self.render(self._initial, self.start) + "\n")

    def render(self, grid: Optional[Dict[Coord, TileStatus]] = None, robot: Optional[Coord] = None) -> str:
        grid = self.grid if grid is None else grid
        robot = self.pos if robot is None else robot
        out = []
        for r in range(self.rows):
            out.append("".join(ROBOT_CHAR if (r, c) == robot else grid[(r, c)].value
                               for c in range(self.cols)))
        return "\n".join(out)

    def reset(self) -> None:
        self.grid = dict(self._initial)
        self.pos = self.start
        self.holdings = []
        self.reached = False

    def in_bounds(self, s: Coord) -> bool:
        r, c = s
        return 0 <= r < self.rows and 0 <= c < self.cols

    def key_colors(self) -> set:
        return {key_color(h) for h in self.holdings if key_color(h)}

    def can_enter(self, s: Coord) -> bool:
        return self.in_bounds(s) and is_passable(self.grid[s], self.key_colors(), self.remaining_chips())

    def apply(self, action: Action) -> Coord:
        """Execute one move; illegal moves leave the robot where it is."""
        if self.reached or action is Action.NOOP:
            return self.pos
        nxt = step(self.pos, action)
        if not self.can_enter(nxt):
            return self.pos

        status = self.grid[nxt]
        if status is TileStatus.CHIP:
            self.grid[nxt] = TileStatus.BLANK
        elif status.is_key:
            self.holdings.append(status.name)
            self.grid[nxt] = TileStatus.BLANK
        elif status.is_door:
            self.grid[nxt] = TileStatus.BLANK
        elif status is TileStatus.DOOR_GOAL:
            self.reached = True
        self.pos = nxt
        return self.pos

    # -------- environment queries --------
    def robot_position(self, agent: Any) -> Optional[Coord]:
        return self.pos

    def neighbor_positions(self, cell: Coord) -> Dict[str, Coord]:
        return {d: p for d, p in grid_neighbors(cell).items() if self.in_bounds(p)}

    def neighbor_tiles(self, agent: Any) -> Dict[str, TileStatus]:
        return {d: self.grid[p] for d, p in self.neighbor_positions(self.pos).items()}

    def tiles(self) -> Optional[Dict[Coord, TileStatus]]:
        return dict(self.grid) if self.reveal else None

    def environment_positions(self) -> Optional[Dict[TileStatus, List[Coord]]]:
        if not self.reveal:
            return None
        out: Dict[TileStatus, List[Coord]] = {}
        for s in sorted(self.grid):
            out.setdefault(self.grid[s], []).append(s)
        return out

    def remaining_chips(self) -> int:
        return sum(1 for st in self.grid.values() if st is TileStatus.CHIP)

    def robot_holdings(self, agent: Any) -> List[str]:
        return list(self.holdings)

    def goal_position(self) -> Optional[Coord]:
        if not self.reveal:
            return None
        for s in sorted(self.grid):
            if self.grid[s] is TileStatus.DOOR_GOAL:
                return s
        return None
