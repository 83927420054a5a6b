"""
graph_builder.py – Build the transfer graph from transaction records.

The detection stages work on a plain adjacency mapping (sender → receivers in
ledger order, repeated transfers kept as repeated edges). A collapsed
NetworkX view is derived from it for summary statistics and visualisation.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple

import networkx as nx

from .models import Transaction

log = logging.getLogger(__name__)

Graph = Dict[str, List[str]]
VelocityMap = Dict[str, int]


def build_graph(transactions: Iterable[Transaction]) -> Tuple[Graph, VelocityMap]:
    """
    Construct the adjacency mapping and per-sender transfer counts.

    Returns
    -------
    graph    : dict[str, list[str]] – receivers per sender, duplicates preserved
    velocity : dict[str, int]       – outbound transaction count per sender
    """
    graph: Graph = {}
    velocity: VelocityMap = {}

    for tx in transactions:
        graph.setdefault(tx.sender_id, []).append(tx.receiver_id)
        velocity[tx.sender_id] = velocity.get(tx.sender_id, 0) + 1

    log.info(
        "Graph built: %d senders, %d edges",
        len(graph),
        sum(len(receivers) for receivers in graph.values()),
    )
    return graph, velocity


def to_networkx(graph: Graph) -> nx.DiGraph:
    """
    Collapse the adjacency mapping into a NetworkX DiGraph.

    Parallel transfers become a single edge whose ``tx_count`` attribute
    counts them. Accounts that only ever receive are added as nodes too.
    Node attributes: sent_count, received_count, tx_count.
    """
    G = nx.DiGraph()
    for sender, receivers in graph.items():
        G.add_node(sender)
        for receiver in receivers:
            if G.has_edge(sender, receiver):
                G[sender][receiver]["tx_count"] += 1
            else:
                G.add_edge(sender, receiver, tx_count=1)

    for node in G.nodes:
        sent = sum(d["tx_count"] for _, _, d in G.out_edges(node, data=True))
        received = sum(d["tx_count"] for _, _, d in G.in_edges(node, data=True))
        G.nodes[node]["sent_count"] = sent
        G.nodes[node]["received_count"] = received
        G.nodes[node]["tx_count"] = sent + received

    return G
