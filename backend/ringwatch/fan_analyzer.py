"""
fan_analyzer.py – Per-account inbound / outbound transaction counts.

Fan-in counts how many transactions name an account as receiver, fan-out how
many name it as sender. Repeated transfers between the same pair all count.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Tuple

from .models import Transaction

log = logging.getLogger(__name__)


def detect_fan_patterns(
    transactions: Iterable[Transaction],
) -> Tuple[Dict[str, int], Dict[str, int]]:
    """Return ``(fan_in, fan_out)`` mappings from account id to count."""
    fan_in: Dict[str, int] = {}
    fan_out: Dict[str, int] = {}

    for tx in transactions:
        fan_out[tx.sender_id] = fan_out.get(tx.sender_id, 0) + 1
        fan_in[tx.receiver_id] = fan_in.get(tx.receiver_id, 0) + 1

    log.info("Fan analysis: %d receivers, %d senders", len(fan_in), len(fan_out))
    return fan_in, fan_out
