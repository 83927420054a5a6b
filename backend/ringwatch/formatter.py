"""
formatter.py – Produce the final API response.

JSON contract
-------------
{
  "suspicious_accounts": [{account_id, suspicion_score, detected_patterns, ring_id}],
  "fraud_rings":         [{ring_id, member_accounts, pattern_type, risk_score}],
  "summary":             {total_accounts_analyzed, suspicious_accounts_flagged,
                          fraud_rings_detected, processing_time_seconds,
                          network_statistics: {total_nodes, total_edges,
                                               graph_density, avg_degree,
                                               weakly_connected_components}},
  "parse_stats":         {...},          // when supplied by the caller
  "graph":               {nodes, edges}  // only when include_graph=True
}

suspicious_accounts keep the engine's ordering (descending score);
fraud_rings keep discovery order.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import networkx as nx

log = logging.getLogger(__name__)


def network_statistics(G: nx.DiGraph) -> Dict[str, Any]:
    """Graph-level statistics for the summary block."""
    n_nodes = G.number_of_nodes()
    n_edges = G.number_of_edges()
    return {
        "total_nodes": n_nodes,
        "total_edges": n_edges,
        "graph_density": round(nx.density(G), 6) if n_nodes > 1 else 0.0,
        "avg_degree": round((2 * n_edges) / n_nodes, 2) if n_nodes > 0 else 0.0,
        "weakly_connected_components": (
            nx.number_weakly_connected_components(G) if n_nodes > 0 else 0
        ),
    }


def graph_payload(G: nx.DiGraph, suspicious_accounts: List[Dict]) -> Dict[str, List[Dict]]:
    """Nodes and edges for front-end visualisation."""
    by_account = {a["account_id"]: a for a in suspicious_accounts}

    nodes: List[Dict] = []
    for node, attrs in G.nodes(data=True):
        nd: Dict[str, Any] = {
            "id":             node,
            "label":          node,
            "suspicious":     node in by_account,
            "tx_count":       attrs.get("tx_count", 0),
            "sent_count":     attrs.get("sent_count", 0),
            "received_count": attrs.get("received_count", 0),
        }
        acc = by_account.get(node)
        if acc is not None:
            nd["suspicion_score"]   = acc["suspicion_score"]
            nd["detected_patterns"] = acc["detected_patterns"]
            nd["ring_id"]           = acc["ring_id"]
        nodes.append(nd)

    edges = [
        {"source": u, "target": v, "tx_count": attrs.get("tx_count", 0)}
        for u, v, attrs in G.edges(data=True)
    ]
    return {"nodes": nodes, "edges": edges}


def format_output(
    analysis: Dict[str, Any],
    G: nx.DiGraph,
    processing_time: float,
    parse_stats: dict | None = None,
    include_graph: bool = False,
) -> Dict[str, Any]:
    """
    Build the complete API response.

    Parameters
    ----------
    analysis        : output of engine.analyze_transactions()
    G               : NetworkX view from graph_builder.to_networkx()
    processing_time : elapsed wall-clock seconds
    parse_stats     : optional parse diagnostic info
    include_graph   : attach the node / edge payload
    """
    suspicious_accounts = analysis["suspicious_accounts"]
    fraud_rings = analysis["fraud_rings"]

    summary: Dict[str, Any] = {
        "total_accounts_analyzed":     len(analysis["accounts"]),
        "suspicious_accounts_flagged": len(suspicious_accounts),
        "fraud_rings_detected":        len(fraud_rings),
        "processing_time_seconds":     round(processing_time, 3),
        "network_statistics":          network_statistics(G),
    }

    response: Dict[str, Any] = {
        "suspicious_accounts": suspicious_accounts,
        "fraud_rings":         fraud_rings,
        "summary":             summary,
    }
    if parse_stats:
        response["parse_stats"] = parse_stats
    if include_graph:
        response["graph"] = graph_payload(G, suspicious_accounts)

    log.info(
        "Format complete: %d suspicious accounts, %d fraud rings",
        len(suspicious_accounts),
        len(fraud_rings),
    )
    return response
