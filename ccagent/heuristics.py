# ccagent/heuristics.py
from typing import Dict, List

from .types import Action, ACTION_DIRECTIONS, Coord, DIRECTIONS, DIRECTION_DELTAS


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def step(s: Coord, action: Action) -> Coord:
    """Cell reached from `s` by `action` (NOOP stays put)."""
    if action is Action.NOOP:
        return s
    dr, dc = DIRECTION_DELTAS[ACTION_DIRECTIONS[action]]
    return (s[0] + dr, s[1] + dc)


def grid_neighbors(s: Coord) -> Dict[str, Coord]:
    r, c = s
    return {d: (r + DIRECTION_DELTAS[d][0], c + DIRECTION_DELTAS[d][1]) for d in DIRECTIONS}


def adjacent_cells(s: Coord) -> List[Coord]:
    # above, below, left, right
    return list(grid_neighbors(s).values())
