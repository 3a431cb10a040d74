# ccagent/env.py
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .types import Coord, TileStatus


class Environment(Protocol):
    """
    Read-only queries the agent makes against the simulator.
    Any of them may answer None when the information is not available.
    """

    def robot_position(self, agent: Any) -> Optional[Coord]:
        ...

    def neighbor_positions(self, cell: Coord) -> Optional[Mapping[str, Coord]]:
        ...

    def neighbor_tiles(self, agent: Any) -> Optional[Mapping[str, TileStatus]]:
        ...

    def tiles(self) -> Optional[Mapping[Coord, TileStatus]]:
        ...

    def environment_positions(self) -> Optional[Dict[TileStatus, List[Coord]]]:
        ...

    def remaining_chips(self) -> Optional[int]:
        ...

    def robot_holdings(self, agent: Any) -> Optional[List[str]]:
        ...

    def goal_position(self) -> Optional[Coord]:
        ...
