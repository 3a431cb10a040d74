# ccagent/agent.py
"""
Planning agent for a Chip's Challenge style grid world.

Each call to `PlanningAgent.get_action` is one decision tick:
  1. fold the local observation into the Knowledge store
  2. record the position and check for a stuck loop
  3. replay the buffered plan if it is still valid, else build a new one,
     prioritising exit -> chips -> keys -> doors (when stuck) -> exploration
The tick always resolves to a single Action; NOOP when nothing else works.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from .astar import MAX_EXPANSIONS, find_path
from .env import Environment
from .heuristics import adjacent_cells, manhattan, step
from .knowledge import Knowledge
from .passability import is_passable
from .selector import nearest_with_path
from .stuck import StuckDetector
from .types import Action, Coord, DIRECTIONS, DIRECTION_ACTIONS, DOORS, KEYS, TileStatus

logger = logging.getLogger(__name__)

_PICKUPS = (TileStatus.CHIP,) + KEYS


@dataclass
class AgentConfig:
    history_size: int = 10        # recent-position window
    stuck_span: int = 6           # positions checked for oscillation
    stuck_max_distinct: int = 2
    revisit_limit: int = 3
    recent_avoid: int = 3         # greedy moves skip cells seen in this many ticks
    max_expansions: int = MAX_EXPANSIONS
    use_full_map: bool = True     # allow env.tiles() queries
    explore_attempts: int = 5
    frontier_candidates: int = 8


class PlanningAgent:
    def __init__(self, env: Environment, config: Optional[AgentConfig] = None):
        self.env = env
        self.config = config or AgentConfig()
        self.kb = Knowledge()
        self.detector = StuckDetector(
            history_size=self.config.history_size,
            span=self.config.stuck_span,
            max_distinct=self.config.stuck_max_distinct,
            revisit_limit=self.config.revisit_limit,
        )
        self.plan: List[Action] = []  # LIFO, next move last
        self.visit_counts: Counter = Counter()
        self.replans = 0
        self.stuck = False

        self._expected: Optional[Coord] = None
        self._tiles: Dict[Coord, TileStatus] = {}
        self._nb_tiles: Dict[str, TileStatus] = {}
        self._chips_left: Optional[int] = None

    def __repr__(self) -> str:
        return f"PlanningAgent(pos={self.env.robot_position(self)}, plan={len(self.plan)})"

    # ----------------- tick -----------------
    def get_action(self) -> Action:
        try:
            return self._tick()
        except Exception:
            logger.exception("decision tick failed; standing still")
            self.plan.clear()
            self._expected = None
            return Action.NOOP

    def _tick(self) -> Action:
        pos = self.env.robot_position(self)
        if pos is None:
            logger.debug("robot position unknown")
            self._expected = None
            return Action.NOOP

        self._sense(pos)
        self.visit_counts[pos] += 1
        self.stuck = self.detector.record(pos)
        if self.stuck:
            logger.info("stuck around %s; trying alternative strategies", pos)

        action = self._replay(pos)
        if action is None:
            action = self._create_new_plan(pos)
        self._expected = step(pos, action)
        return action

    def _sense(self, pos: Coord) -> None:
        nb_cells = self.env.neighbor_positions(pos)
        self._nb_tiles = dict(self.env.neighbor_tiles(self) or {})
        full = self.env.tiles() if self.config.use_full_map else None

        current = full.get(pos) if full else None
        if current is None and self.kb.status(pos) in _PICKUPS:
            # standing on it means it has been picked up
            current = TileStatus.BLANK
        self.kb.observe(pos, nb_cells, self._nb_tiles, self.env.robot_holdings(self), current)

        self._chips_left = self.env.remaining_chips()
        self._tiles = self.kb.merged(full)

    def _replay(self, pos: Coord) -> Optional[Action]:
        """Next buffered move, or None after dropping a stale buffer."""
        if not self.plan:
            return None
        if self.stuck:
            self._drop_plan("stuck")
            return None
        if pos != self._expected:
            self._drop_plan(f"off course at {pos}, expected {self._expected}")
            return None
        if not self._passable_cell(step(pos, self.plan[-1])):
            self._drop_plan(f"next move from {pos} is blocked")
            return None
        return self.plan.pop()

    def _drop_plan(self, why: str) -> None:
        logger.debug("discarding %d buffered moves: %s", len(self.plan), why)
        self.plan.clear()

    # ----------------- priorities -----------------
    def _create_new_plan(self, pos: Coord) -> Action:
        self.plan.clear()
        if self._chips_left == 0:
            return self._head_for_goal(pos)

        action = self._collect(pos, (TileStatus.CHIP,), "chip")
        if action is not None:
            return action

        action = self._collect(pos, KEYS, "key")
        if action is not None:
            return action

        if self.stuck:
            action = self._open_doors(pos)
            if action is not None:
                return action

        return self._explore(pos)

    def _head_for_goal(self, pos: Coord) -> Action:
        goal = self.locate_goal()
        if goal is not None and pos == goal:
            return Action.NOOP

        if self.stuck:
            action = self._open_doors(pos)
            if action is not None:
                return action

        if goal is None:
            logger.info("goal position unknown; searching")
            return self._search_for_goal(pos)
        return self._move_toward(pos, goal)

    def locate_goal(self) -> Optional[Coord]:
        goal = self.env.goal_position()
        if goal is not None:
            return goal

        positions = self.env.environment_positions()
        if positions and positions.get(TileStatus.DOOR_GOAL):
            return positions[TileStatus.DOOR_GOAL][0]

        goal = self.kb.find_first(TileStatus.DOOR_GOAL)
        if goal is not None:
            return goal

        if not self.config.use_full_map:
            return None
        for s, st in (self.env.tiles() or {}).items():
            if st is TileStatus.DOOR_GOAL:
                return s
        return None

    def _collect(self, pos: Coord, statuses: Tuple[TileStatus, ...], label: str) -> Optional[Action]:
        candidates = self._positions(statuses)
        if not candidates:
            return None
        found = nearest_with_path(pos, candidates, self._plan_path)
        if found is None:
            logger.debug("none of %d %s targets is reachable", len(candidates), label)
            return None
        target, moves = found
        logger.debug("heading for %s at %s (%d moves)", label, target, len(moves))
        return self._follow(moves)

    def _open_doors(self, pos: Coord) -> Optional[Action]:
        """Head for a door we hold the key to: unvisited first, else least visited."""
        if not self.kb.inventory:
            return None
        doors = self._positions(tuple(s for s in DOORS if s.color in self.kb.inventory))
        if not doors:
            return None

        for door in doors:
            if door not in self.kb.visited:
                logger.info("moving toward unvisited door at %s", door)
                return self._move_toward(pos, door)

        door = min(doors, key=lambda d: self.visit_counts[d])
        logger.info("moving toward least visited door at %s", door)
        return self._move_toward(pos, door)

    # ----------------- movement -----------------
    def _move_toward(self, pos: Coord, target: Coord) -> Action:
        # 1. straight A*
        moves = self._plan_path(pos, target)
        if moves:
            return self._follow(moves)

        # 2. the best reachable cell next to the target
        around = [a for a in adjacent_cells(target) if self._passable_cell(a)]
        found = nearest_with_path(pos, around, self._plan_path)
        if found is not None:
            logger.debug("target %s unreachable, going next to it at %s", target, found[0])
            return self._follow(found[1])

        # 3. greedy step
        best: Optional[str] = None
        best_dist = 0
        for d, nb in self._open_neighbors(pos):
            if self.detector.recently_visited(nb, self.config.recent_avoid):
                continue
            dist = manhattan(nb, target)
            if best is None or dist < best_dist:
                best, best_dist = d, dist
        if best is not None:
            logger.debug("moving %s toward %s", best, target)
            return DIRECTION_ACTIONS[best]

        # 4.
        return self._explore(pos)

    def _search_for_goal(self, pos: Coord) -> Action:
        frontier = self.kb.frontier(self._chips_left, self.env.neighbor_positions)
        frontier.sort(key=lambda s: (manhattan(pos, s), s))
        found = nearest_with_path(pos, frontier[:self.config.frontier_candidates], self._plan_path)
        if found is not None:
            logger.debug("searching for goal via frontier cell %s", found[0])
            return self._follow(found[1])
        return self._explore(pos)

    def _explore(self, pos: Coord) -> Action:
        open_nbs = self._open_neighbors(pos)

        for d, nb in open_nbs:
            if nb not in self.kb.visited:
                logger.debug("exploring unvisited direction %s", d)
                return DIRECTION_ACTIONS[d]

        known = [s for s in self.kb.tiles
                 if s != pos and is_passable(self.kb.tiles[s], self.kb.inventory, self._chips_left)]
        known.sort(key=lambda s: (self.visit_counts[s], manhattan(pos, s), s))
        for target in known[:self.config.explore_attempts]:
            moves = self._plan_path(pos, target)
            if moves:
                logger.debug("moving to least visited cell %s", target)
                return self._follow(moves)

        for d, nb in open_nbs:
            if not self.detector.recently_visited(nb, self.config.recent_avoid):
                return DIRECTION_ACTIONS[d]
        if open_nbs:
            return DIRECTION_ACTIONS[open_nbs[0][0]]

        logger.info("no valid moves from %s; staying put", pos)
        return Action.NOOP

    # ----------------- helpers -----------------
    def _follow(self, moves: List[Action]) -> Action:
        self.plan = list(reversed(moves))
        self.replans += 1
        return self.plan.pop()

    def _plan_path(self, start: Coord, goal: Coord) -> List[Action]:
        return find_path(start, goal, self._tiles, self._passable,
                         self.env.neighbor_positions, self.config.max_expansions)

    def _passable(self, status: TileStatus) -> bool:
        return is_passable(status, self.kb.inventory, self._chips_left)

    def _passable_cell(self, s: Coord) -> bool:
        status = self._tiles.get(s)
        return status is None or self._passable(status)

    def _open_neighbors(self, pos: Coord) -> List[Tuple[str, Coord]]:
        """Observed, enterable neighbours in direction order."""
        cells = self.env.neighbor_positions(pos) or {}
        out = []
        for d in DIRECTIONS:
            nb = cells.get(d)
            status = self._nb_tiles.get(d)
            if nb is not None and status is not None and self._passable(status):
                out.append((d, nb))
        return out

    def _positions(self, statuses: Iterable[TileStatus]) -> List[Coord]:
        statuses = tuple(statuses)
        positions = self.env.environment_positions()
        if positions is None:
            return self.kb.positions_of(statuses)
        out: List[Coord] = []
        for st in statuses:
            out.extend(positions.get(st) or ())
        return out
