# ccagent/selector.py
from __future__ import annotations
from typing import Callable, Iterable, List, Optional, Tuple

from .types import Action, Coord

PlanFn = Callable[[Coord, Coord], List[Action]]


def nearest_with_path(start: Coord, candidates: Iterable[Coord], plan: PlanFn) -> Optional[Tuple[Coord, List[Action]]]:
    """
    Plan to every candidate and keep the shortest non-empty plan.
    Unreachable candidates (empty plan) are dropped; the first of equal length wins.
    """
    best: Optional[Tuple[Coord, List[Action]]] = None
    for target in candidates:
        if target is None:
            continue
        moves = plan(start, target)
        if moves and (best is None or len(moves) < len(best[1])):
            best = (target, moves)
    return best


def select_nearest(start: Coord, candidates: Iterable[Coord], plan: PlanFn) -> Optional[Coord]:
    found = nearest_with_path(start, candidates, plan)
    return found[0] if found else None
