"""
cycle_detector.py – Detect circular fund routing (money-mule rings).

Strategy
--------
From every sender, run a depth-bounded DFS that tracks the current path.
Whenever an edge leads back to the start node and the path holds at least
CYCLE_MIN_LEN accounts, the path is recorded as a ring. Nodes already on the
path are never revisited, so every ring is a simple cycle.

The DFS uses an explicit stack of neighbour iterators instead of recursion.
Visit order is identical to the recursive form, which keeps ring discovery
order (and therefore ring ids) stable.

Rotations
---------
Because every node is used as a start, a k-node cycle is found k times.
By default each rotation is kept as its own ring. With ``dedupe_rotations``
the cycle is normalised by rotating its smallest account to the front and
only the first discovery is kept.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from .config import CYCLE_MIN_LEN, CYCLE_MAX_DEPTH, RING_BASE_RISK, RING_PATTERN_TYPE
from .graph_builder import Graph

log = logging.getLogger(__name__)

_EXHAUSTED = object()


class RingLimitExceeded(RuntimeError):
    """Raised when enumeration finds more closed paths than ``max_rings``."""

    def __init__(self, limit: int):
        super().__init__(f"More than {limit} cycles found; graph too dense to enumerate.")
        self.limit = limit


def _canonical_cycle(cycle: List[str]) -> tuple:
    """
    Rotate cycle so the lexicographically smallest node is first.
    Returns a tuple for use as a set key.
    """
    min_idx = cycle.index(min(cycle))
    return tuple(cycle[min_idx:] + cycle[:min_idx])


def _closed_paths(graph: Graph, start: str, max_depth: int) -> Iterator[List[str]]:
    """Yield every path from ``start`` that closes back on ``start``."""
    stack = [([start], iter(graph.get(start, ())))]
    while stack:
        path, neighbours = stack[-1]
        neighbour = next(neighbours, _EXHAUSTED)
        if neighbour is _EXHAUSTED:
            stack.pop()
            continue

        if neighbour == start and len(path) >= CYCLE_MIN_LEN:
            yield list(path)

        # depth of the neighbour is len(path); deeper nodes are not expanded
        if neighbour not in path and len(path) <= max_depth:
            stack.append((path + [neighbour], iter(graph.get(neighbour, ()))))


def detect_cycles(
    graph: Graph,
    max_depth: int = CYCLE_MAX_DEPTH,
    dedupe_rotations: bool = False,
    max_rings: Optional[int] = None,
) -> List[Dict]:
    """
    Enumerate simple cycles reachable within ``max_depth`` hops of each start.

    ``max_rings`` caps the number of closed paths discovered (rotations
    included, even when deduplicated). Exceeding it raises RingLimitExceeded;
    ``None`` means no cap.

    Returns
    -------
    List of ring dicts in discovery order:
        ring_id         : str        – "RING_001", "RING_002", …
        member_accounts : list[str]  – the cycle path, start account first
        pattern_type    : str        – always "cycle"
        risk_score      : int        – RING_BASE_RISK + cycle length
    """
    rings: List[Dict] = []
    seen: set = set()
    ring_count = 0
    rotations_skipped = 0
    discovered = 0

    for start in graph:
        for path in _closed_paths(graph, start, max_depth):
            discovered += 1
            if max_rings is not None and discovered > max_rings:
                log.warning("Cycle cap (%d) exceeded; aborting enumeration.", max_rings)
                raise RingLimitExceeded(max_rings)

            if dedupe_rotations:
                key = _canonical_cycle(path)
                if key in seen:
                    rotations_skipped += 1
                    continue
                seen.add(key)

            ring_count += 1
            rings.append({
                "ring_id":         f"RING_{ring_count:03d}",
                "member_accounts": path,
                "pattern_type":    RING_PATTERN_TYPE,
                "risk_score":      RING_BASE_RISK + len(path),
            })

    if dedupe_rotations:
        log.info(
            "Cycle detection: %d rings found (%d rotations skipped)",
            len(rings),
            rotations_skipped,
        )
    else:
        log.info("Cycle detection: %d rings found", len(rings))
    return rings
