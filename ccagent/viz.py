# ccagent/viz.py
from __future__ import annotations
import os
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw

from .grid import ChipWorld
from .types import Coord, TileStatus

RGB = Tuple[int, int, int]

TILE_COLORS: Dict[TileStatus, RGB] = {
    TileStatus.BLANK: (240, 240, 240),
    TileStatus.WALL: (0, 0, 0),
    TileStatus.WATER: (70, 120, 220),
    TileStatus.CHIP: (250, 210, 60),
    TileStatus.DOOR_GOAL: (255, 170, 80),
}

ITEM_COLORS: Dict[str, RGB] = {
    "BLUE": (40, 90, 230),
    "GREEN": (40, 170, 70),
    "RED": (220, 50, 50),
    "YELLOW": (230, 200, 30),
}


def tile_color(status: TileStatus) -> RGB:
    if status.color is not None:
        return ITEM_COLORS[status.color]
    return TILE_COLORS[status]


def draw_world_png(world: ChipWorld,
                   path: Optional[List[Coord]],
                   out_png: str,
                   cell: int = 16) -> None:
    """Current world state plus the trail the robot walked."""
    W, H = world.cols * cell, world.rows * cell
    img = Image.new("RGB", (W, H), (255, 255, 255))
    drw = ImageDraw.Draw(img)

    for (r, c), status in world.grid.items():
        x0, y0 = c * cell, r * cell
        box = (x0, y0, x0 + cell - 1, y0 + cell - 1)
        if status.is_key:
            # keys drawn small on floor, doors fill the cell
            drw.rectangle(box, fill=TILE_COLORS[TileStatus.BLANK])
            q = cell // 4
            drw.ellipse((x0 + q, y0 + q, x0 + cell - q, y0 + cell - q), fill=tile_color(status))
        else:
            drw.rectangle(box, fill=tile_color(status))

    # path
    if path and len(path) > 1:
        q = cell // 3
        for (r, c) in path:
            x0, y0 = c * cell, r * cell
            drw.rectangle((x0 + q, y0 + q, x0 + cell - q, y0 + cell - q), fill=(160, 190, 255))

    pr, pc = world.pos
    drw.rectangle((pc*cell + 2, pr*cell + 2, pc*cell + cell - 3, pr*cell + cell - 3), fill=(100, 220, 120))

    if os.path.dirname(out_png):
        os.makedirs(os.path.dirname(out_png), exist_ok=True)
    img.save(out_png)
