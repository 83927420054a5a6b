"""
config.py – Centralised configuration via environment variables.
All tunable thresholds live here so nothing is scattered across modules.
"""
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ── Upload limits ──────────────────────────────────────────────────────────────
MAX_FILE_SIZE_MB: int = int(os.getenv("MAX_FILE_SIZE_MB", "20"))
MAX_FILE_SIZE_BYTES: int = MAX_FILE_SIZE_MB * 1024 * 1024
MAX_ROWS: int = int(os.getenv("MAX_ROWS", "10000"))

# ── CSV header aliases (compared after strip / lower / whitespace → "_") ──────
SENDER_ALIASES: tuple = (
    "sender_id", "sender", "from", "from_account", "source", "source_account",
)
RECEIVER_ALIASES: tuple = (
    "receiver_id", "receiver", "to", "to_account", "destination", "target",
    "target_account",
)

# ── Cycle detection ────────────────────────────────────────────────────────────
CYCLE_MIN_LEN: int = 3
# Nodes deeper than this are not expanded; the start node sits at depth 0.
CYCLE_MAX_DEPTH: int = int(os.getenv("CYCLE_MAX_DEPTH", "6"))
# Off by default: each rotation of a cycle is reported as its own ring.
DEDUPE_RING_ROTATIONS: bool = _env_flag("DEDUPE_RING_ROTATIONS")
# Upper bound on closed paths one upload may produce; dense graphs beyond it
# are rejected instead of enumerated.
MAX_RINGS: int = int(os.getenv("MAX_RINGS", "50000"))
RING_BASE_RISK: int = 90
RING_PATTERN_TYPE: str = "cycle"

# ── Fan / velocity thresholds ──────────────────────────────────────────────────
FAN_IN_THRESHOLD: int = int(os.getenv("FAN_IN_THRESHOLD", "5"))
FAN_OUT_THRESHOLD: int = int(os.getenv("FAN_OUT_THRESHOLD", "5"))
HIGH_VELOCITY_THRESHOLD: int = int(os.getenv("HIGH_VELOCITY_THRESHOLD", "10"))

# ── Scoring ────────────────────────────────────────────────────────────────────
SCORE_CYCLE: int = 50
SCORE_FAN_IN: int = 20
SCORE_FAN_OUT: int = 20
SCORE_HIGH_VELOCITY: int = 10
MAX_SUSPICION_SCORE: int = 100

# ring_id reported for accounts that are not in any ring
NO_RING_ID: str = "N/A"

# ── HTTP ───────────────────────────────────────────────────────────────────────
CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "*").split(",")
