# ccagent/knowledge.py
from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set

from .heuristics import adjacent_cells
from .passability import is_passable, key_color
from .types import Coord, DIRECTIONS, TileStatus


class Knowledge:
    """
    Agent's knowledge:
    - every tile status ever observed (latest observation wins)
    - cells physically visited
    - key colours held; only ever grows within a run
    UNKNOWN cells are not stored; planners treat them as traversable.
    """
    def __init__(self):
        self.tiles: Dict[Coord, TileStatus] = {}
        self.visited: Set[Coord] = set()
        self.inventory: Set[str] = set()

    def observe(self,
                at: Coord,
                neighbor_cells: Optional[Mapping[str, Coord]],
                neighbor_statuses: Optional[Mapping[str, TileStatus]],
                holdings: Optional[Iterable[str]] = None,
                current_status: Optional[TileStatus] = None) -> None:
        self.visited.add(at)
        if current_status is not None:
            self.tiles[at] = current_status
        if neighbor_cells and neighbor_statuses:
            for d in DIRECTIONS:
                nb = neighbor_cells.get(d)
                status = neighbor_statuses.get(d)
                if nb is None or status is None:
                    continue
                self.tiles[nb] = status
        for item in holdings or ():
            color = key_color(item)
            if color:
                self.inventory.add(color)

    def status(self, s: Coord) -> Optional[TileStatus]:
        return self.tiles.get(s)

    def is_passable(self, s: Coord, remaining_chips: Optional[int]) -> bool:
        """Known cells go through the oracle; unknown ones are optimistic."""
        status = self.tiles.get(s)
        if status is None:
            return True
        return is_passable(status, self.inventory, remaining_chips)

    def merged(self, full_map: Optional[Mapping[Coord, TileStatus]] = None) -> Dict[Coord, TileStatus]:
        """Known tiles overlaid with a full map when the environment offers one."""
        tiles = dict(self.tiles)
        if full_map:
            tiles.update(full_map)
        return tiles

    def find_first(self, status: TileStatus) -> Optional[Coord]:
        for s, st in self.tiles.items():
            if st is status:
                return s
        return None

    def positions_of(self, statuses: Iterable[TileStatus]) -> List[Coord]:
        wanted = set(statuses)
        return sorted(s for s, st in self.tiles.items() if st in wanted)

    def frontier(self,
                 remaining_chips: Optional[int],
                 neighbors: Optional[Callable[[Coord], Optional[Mapping[str, Coord]]]] = None) -> List[Coord]:
        """
        Unrecorded cells next to a known passable cell, in row-major order.
        `neighbors` bounds the grid; without it all four adjacent cells count.
        """
        out: Set[Coord] = set()
        for s, st in self.tiles.items():
            if not is_passable(st, self.inventory, remaining_chips):
                continue
            if neighbors is None:
                cand: Iterable[Coord] = adjacent_cells(s)
            else:
                cand = (neighbors(s) or {}).values()
            for nb in cand:
                if nb is not None and nb not in self.tiles:
                    out.add(nb)
        return sorted(out)
