"""
scoring.py – Suspicion scoring engine.

Scoring model
-------------
1. Ring membership  – account appears in any detected cycle
2. High fan-in      – receives at least FAN_IN_THRESHOLD transactions
3. High fan-out     – sends at least FAN_OUT_THRESHOLD transactions
4. High velocity    – sends at least HIGH_VELOCITY_THRESHOLD transactions

Contributions are additive and the total is capped at MAX_SUSPICION_SCORE.
Accounts that match nothing get no result at all.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .config import (
    SCORE_CYCLE, SCORE_FAN_IN, SCORE_FAN_OUT, SCORE_HIGH_VELOCITY,
    FAN_IN_THRESHOLD, FAN_OUT_THRESHOLD, HIGH_VELOCITY_THRESHOLD,
    MAX_SUSPICION_SCORE, NO_RING_ID,
)

log = logging.getLogger(__name__)


def _first_ring(account: str, rings: List[Dict]) -> Optional[Dict]:
    return next((r for r in rings if account in r["member_accounts"]), None)


def calculate_suspicion(
    account: str,
    rings: List[Dict],
    fan_in: Dict[str, int],
    fan_out: Dict[str, int],
    velocity: Dict[str, int],
) -> Optional[Dict]:
    """
    Score a single account.

    Parameters
    ----------
    account  : account id to score
    rings    : ring list from detect_cycles(), in discovery order
    fan_in   : inbound transaction count per account
    fan_out  : outbound transaction count per account
    velocity : outbound transaction count per sender

    Returns
    -------
    None when the account matches no pattern, otherwise a dict with
        suspicion_score   : int        – 1–100
        detected_patterns : list[str]  – labels in scoring order
        ring_id           : str        – first matching ring, or NO_RING_ID
    """
    score = 0
    patterns: List[str] = []
    ring_id = NO_RING_ID

    ring = _first_ring(account, rings)
    if ring is not None:
        score += SCORE_CYCLE
        patterns.append("cycle_network")
        ring_id = ring["ring_id"]

    if fan_in.get(account, 0) >= FAN_IN_THRESHOLD:
        score += SCORE_FAN_IN
        patterns.append("high_fan_in")

    if fan_out.get(account, 0) >= FAN_OUT_THRESHOLD:
        score += SCORE_FAN_OUT
        patterns.append("high_fan_out")

    if velocity.get(account, 0) >= HIGH_VELOCITY_THRESHOLD:
        score += SCORE_HIGH_VELOCITY
        patterns.append("high_velocity")

    score = min(MAX_SUSPICION_SCORE, score)
    if score == 0:
        return None

    return {
        "suspicion_score":   score,
        "detected_patterns": patterns,
        "ring_id":           ring_id,
    }
