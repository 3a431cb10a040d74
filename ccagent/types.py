# ccagent/types.py
from __future__ import annotations
from enum import Enum
from typing import Dict, Optional, Tuple

Coord = Tuple[int, int]  # (row, col)


class Action(Enum):
    NOOP = "noop"
    MOVE_UP = "up"
    MOVE_DOWN = "down"
    MOVE_LEFT = "left"
    MOVE_RIGHT = "right"


class TileStatus(Enum):
    BLANK = "."
    WALL = "#"
    WATER = "~"
    CHIP = "c"
    KEY_BLUE = "b"
    KEY_GREEN = "g"
    KEY_RED = "r"
    KEY_YELLOW = "y"
    DOOR_BLUE = "B"
    DOOR_GREEN = "G"
    DOOR_RED = "R"
    DOOR_YELLOW = "Y"
    DOOR_GOAL = "E"

    @property
    def is_key(self) -> bool:
        return self.name.startswith("KEY_")

    @property
    def is_door(self) -> bool:
        return self.name.startswith("DOOR_") and self is not TileStatus.DOOR_GOAL

    @property
    def color(self) -> Optional[str]:
        """BLUE/GREEN/RED/YELLOW for keys and coloured doors, else None."""
        if self.is_key or self.is_door:
            return self.name.split("_", 1)[1]
        return None


KEYS = tuple(s for s in TileStatus if s.is_key)
DOORS = tuple(s for s in TileStatus if s.is_door)

# fixed enumeration order used everywhere a direction is picked
DIRECTIONS: Tuple[str, ...] = ("above", "below", "left", "right")

DIRECTION_DELTAS: Dict[str, Coord] = {
    "above": (-1, 0),
    "below": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}

DIRECTION_ACTIONS: Dict[str, Action] = {
    "above": Action.MOVE_UP,
    "below": Action.MOVE_DOWN,
    "left": Action.MOVE_LEFT,
    "right": Action.MOVE_RIGHT,
}

ACTION_DIRECTIONS: Dict[Action, str] = {a: d for d, a in DIRECTION_ACTIONS.items()}
