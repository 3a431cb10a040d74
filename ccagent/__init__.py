# ccagent/__init__.py
from .types import Action, Coord, TileStatus
from .heuristics import manhattan
from .knowledge import Knowledge
from .passability import is_passable
from .astar import astar_once, find_path, AStarResult, PathStopReason
from .selector import select_nearest, nearest_with_path
from .stuck import StuckDetector
from .agent import AgentConfig, PlanningAgent
from .grid import ChipWorld, WorldFormatError
from .planners import run_episode, RunStats
from .viz import draw_world_png

__all__ = [
    "Action", "Coord", "TileStatus", "manhattan",
    "Knowledge", "is_passable",
    "astar_once", "find_path", "AStarResult", "PathStopReason",
    "select_nearest", "nearest_with_path", "StuckDetector",
    "AgentConfig", "PlanningAgent",
    "ChipWorld", "WorldFormatError", "run_episode", "RunStats",
    "draw_world_png",
]
