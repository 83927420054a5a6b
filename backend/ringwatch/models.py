"""
models.py – Pydantic models.
Transaction is the engine's input record; the rest define the exact JSON
contract the API must return.
"""
from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Transaction(BaseModel):
    """One ledger row. Immutable; both ids are non-empty after parsing."""
    model_config = ConfigDict(frozen=True)

    sender_id: str = Field(..., min_length=1)
    receiver_id: str = Field(..., min_length=1)


class SuspiciousAccount(BaseModel):
    account_id: str
    suspicion_score: int = Field(..., ge=0, le=100)
    detected_patterns: List[str]
    ring_id: str


class FraudRing(BaseModel):
    ring_id: str
    member_accounts: List[str] = Field(..., min_length=3)
    pattern_type: str
    risk_score: int


class NetworkStatistics(BaseModel):
    total_nodes: int
    total_edges: int
    graph_density: float
    avg_degree: float
    weakly_connected_components: int


class AnalysisSummary(BaseModel):
    total_accounts_analyzed: int
    suspicious_accounts_flagged: int
    fraud_rings_detected: int
    processing_time_seconds: float
    network_statistics: Optional[NetworkStatistics] = None


class GraphNode(BaseModel):
    id: str
    label: str
    suspicious: bool
    tx_count: int
    sent_count: int
    received_count: int
    suspicion_score: Optional[int] = None
    detected_patterns: Optional[List[str]] = None
    ring_id: Optional[str] = None


class GraphEdge(BaseModel):
    source: str
    target: str
    tx_count: int


class GraphData(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]


class ParseStats(BaseModel):
    total_rows: int
    valid_rows: int
    dropped_rows: int
    self_transactions: int
    warnings: List[str] = []


class AnalysisResult(BaseModel):
    suspicious_accounts: List[SuspiciousAccount]
    fraud_rings: List[FraudRing]
    summary: AnalysisSummary
    parse_stats: Optional[ParseStats] = None
    graph: Optional[GraphData] = None
