# ccagent/passability.py
from __future__ import annotations
from typing import AbstractSet, Optional

from .types import TileStatus


def key_color(item: str) -> Optional[str]:
    """'KEY_BLUE' -> 'BLUE'; anything that is not a key -> None."""
    if item and item.startswith("KEY_"):
        return item[len("KEY_"):]
    return None


def door_color(status: TileStatus) -> Optional[str]:
    return status.color if status.is_door else None


def is_passable(status: TileStatus, inventory: AbstractSet[str], remaining_chips: Optional[int]) -> bool:
    """
    Whether a cell with a concrete `status` may be entered right now.
    `inventory` holds key colours; an unknown chip count keeps the exit shut.
    """
    if status in (TileStatus.WALL, TileStatus.WATER):
        return False
    if status.is_door:
        return status.color in inventory
    if status is TileStatus.DOOR_GOAL:
        return remaining_chips == 0
    return True
