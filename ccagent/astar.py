# ccagent/astar.py
from __future__ import annotations
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple
import heapq
import logging

from .heuristics import grid_neighbors, manhattan
from .types import Action, Coord, DIRECTIONS, DIRECTION_ACTIONS, TileStatus

logger = logging.getLogger(__name__)

MAX_EXPANSIONS = 1000

NeighborFn = Callable[[Coord], Optional[Mapping[str, Coord]]]
PassableFn = Callable[[TileStatus], bool]


class PathStopReason(Enum):
    SUCCESS = "success"
    ALREADY_AT_TARGET = "already_at_target"
    NO_PATH_EXISTS = "no_path_exists"
    ITERATION_LIMIT = "iteration_limit"


class AStarResult:
    def __init__(self,
                 path: Optional[List[Action]],
                 cells: Optional[List[Coord]],
                 expanded: Set[Coord],
                 reason: PathStopReason):
        self.path = path
        self.cells = cells
        self.expanded = expanded
        self.reason = reason

    def __repr__(self) -> str:
        if self.path is None:
            return f"AStarResult(path=None, reason={self.reason.value}, expanded={len(self.expanded)})"
        return f"AStarResult(path=[{len(self.path)} steps], expanded={len(self.expanded)})"


def astar_once(
    start: Coord,
    goal: Coord,
    tiles: Mapping[Coord, TileStatus],
    passable: PassableFn,
    neighbors: NeighborFn = grid_neighbors,
    max_expansions: int = MAX_EXPANSIONS,
) -> AStarResult:
    """
    A* over a (possibly partial) tile map.
    Cells missing from `tiles` are assumed passable; known ones go through `passable`.
    Each node keeps its back-pointer and the direction label that reached it,
    so the returned path is a list of moves from `start` to `goal`.
    """
    if start == goal:
        return AStarResult([], [start], set(), PathStopReason.ALREADY_AT_TARGET)

    def h(s: Coord) -> int:
        return manhattan(s, goal)

    openh: List[Tuple[int, int, Coord]] = []
    g: Dict[Coord, int] = {start: 0}
    came_from: Dict[Coord, Tuple[Coord, str]] = {}
    closed: Set[Coord] = set()
    counter = 0

    heapq.heappush(openh, (h(start), counter, start))
    counter += 1

    while openh:
        _, _, s = heapq.heappop(openh)
        if s in closed:
            continue
        if len(closed) >= max_expansions:
            logger.debug("A* %s -> %s hit the %d expansion cap", start, goal, max_expansions)
            return AStarResult(None, None, closed, PathStopReason.ITERATION_LIMIT)
        closed.add(s)

        if s == goal:
            # reconstruct
            moves: List[Action] = []
            cells = [s]
            while s in came_from:
                prev, d = came_from[s]
                moves.append(DIRECTION_ACTIONS[d])
                s = prev
                cells.append(s)
            moves.reverse()
            cells.reverse()
            return AStarResult(moves, cells, closed, PathStopReason.SUCCESS)

        nbs = neighbors(s)
        if not nbs:
            continue
        for d in DIRECTIONS:
            nb = nbs.get(d)
            if nb is None or nb in closed:
                continue
            status = tiles.get(nb)
            if status is not None and not passable(status):
                continue
            tentative = g[s] + 1
            if nb not in g or tentative < g[nb]:
                g[nb] = tentative
                came_from[nb] = (s, d)
                heapq.heappush(openh, (tentative + h(nb), counter, nb))
                counter += 1

    return AStarResult(None, None, closed, PathStopReason.NO_PATH_EXISTS)


def find_path(
    start: Coord,
    goal: Coord,
    tiles: Mapping[Coord, TileStatus],
    passable: PassableFn,
    neighbors: NeighborFn = grid_neighbors,
    max_expansions: int = MAX_EXPANSIONS,
) -> List[Action]:
    """Moves from start to goal; [] when start == goal or no path exists."""
    res = astar_once(start, goal, tiles, passable, neighbors, max_expansions=max_expansions)
    return res.path or []
