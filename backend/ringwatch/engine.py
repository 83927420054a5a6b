"""
engine.py – Run the detection stages over one transaction batch.

    transactions → build_graph → (graph, velocity) → detect_cycles → rings
    transactions → detect_fan_patterns → (fan_in, fan_out)
    (rings, fan_in, fan_out, velocity) → calculate_suspicion per account

Every call builds its own maps from scratch; nothing is cached between calls.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import CYCLE_MAX_DEPTH, DEDUPE_RING_ROTATIONS
from .cycle_detector import detect_cycles
from .fan_analyzer import detect_fan_patterns
from .graph_builder import build_graph
from .models import Transaction
from .scoring import calculate_suspicion

log = logging.getLogger(__name__)


def collect_accounts(transactions: Sequence[Transaction]) -> List[str]:
    """Distinct account ids in first-seen order (sender before receiver)."""
    accounts: Dict[str, None] = {}
    for tx in transactions:
        accounts.setdefault(tx.sender_id)
        accounts.setdefault(tx.receiver_id)
    return list(accounts)


def analyze_transactions(
    transactions: Sequence[Transaction],
    max_depth: int = CYCLE_MAX_DEPTH,
    dedupe_rotations: bool = DEDUPE_RING_ROTATIONS,
    max_rings: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Detect rings and score every account in ``transactions``.

    Returns
    -------
    dict with keys
        suspicious_accounts : list[dict] – sorted by suspicion_score, descending
        fraud_rings         : list[dict] – discovery order
        accounts            : list[str]  – every distinct account analysed
        graph               : dict       – adjacency mapping used for detection

    Raises RingLimitExceeded when ``max_rings`` is set and exceeded.
    """
    graph, velocity = build_graph(transactions)
    rings = detect_cycles(
        graph,
        max_depth=max_depth,
        dedupe_rotations=dedupe_rotations,
        max_rings=max_rings,
    )
    fan_in, fan_out = detect_fan_patterns(transactions)

    accounts = collect_accounts(transactions)

    suspicious_accounts: List[Dict] = []
    for account in accounts:
        result = calculate_suspicion(account, rings, fan_in, fan_out, velocity)
        if result is not None:
            suspicious_accounts.append({"account_id": account, **result})

    # sort() is stable: ties keep account first-seen order
    suspicious_accounts.sort(key=lambda a: a["suspicion_score"], reverse=True)

    log.info(
        "Analysis: %d accounts, %d flagged, %d rings",
        len(accounts),
        len(suspicious_accounts),
        len(rings),
    )
    return {
        "suspicious_accounts": suspicious_accounts,
        "fraud_rings":         rings,
        "accounts":            accounts,
        "graph":               graph,
    }
