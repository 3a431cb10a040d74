# ccagent/planners.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional
import logging
import time

from .agent import AgentConfig, PlanningAgent
from .grid import ChipWorld
from .types import Action, Coord

logger = logging.getLogger(__name__)

TickHook = Callable[[int, Action, ChipWorld], None]


@dataclass
class RunStats:
    reached: bool
    ticks: int
    moves: int
    noops: int
    replans: int
    elapsed_sec: float
    path_taken: List[Coord]
    chips_left: int


def run_episode(world: ChipWorld,
                agent: Optional[PlanningAgent] = None,
                max_ticks: int = 1000,
                config: Optional[AgentConfig] = None,
                on_tick: Optional[TickHook] = None) -> RunStats:
    if agent is None:
        agent = PlanningAgent(world, config)

    ticks = moves = noops = 0
    path_taken: List[Coord] = [world.pos]
    t0 = time.perf_counter()

    while not world.reached and ticks < max_ticks:
        action = agent.get_action()
        ticks += 1
        if action is Action.NOOP:
            noops += 1
        before = world.pos
        world.apply(action)
        if world.pos != before:
            moves += 1
            path_taken.append(world.pos)
        if on_tick is not None:
            on_tick(ticks, action, world)

    if not world.reached:
        logger.warning("gave up after %d ticks with %d chips left", ticks, world.remaining_chips())

    return RunStats(world.reached, ticks, moves, noops, agent.replans,
                    time.perf_counter() - t0, path_taken, world.remaining_chips())
