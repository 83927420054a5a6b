"""
parser.py – CSV parsing and validation for the upload endpoint.

Validates:
  • Sender / receiver columns present (a few header aliases accepted)
  • Non-empty sender and receiver on every kept row
  • Row limit (MAX_ROWS)
  • Encoding auto-detection (UTF-8 / latin-1 fallback)

Quoted fields (embedded commas, doubled quotes) are handled by pandas.
Other columns such as amount or timestamp are ignored.
"""
from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple

import pandas as pd

from .config import MAX_ROWS, SENDER_ALIASES, RECEIVER_ALIASES
from .models import Transaction

log = logging.getLogger(__name__)


def _decode_bytes(raw: bytes) -> str:
    """Try UTF-8, then latin-1 fallback."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1", errors="replace")


def normalise_header(name: str) -> str:
    """``" Sender  ID "`` → ``"sender_id"``."""
    return "_".join(str(name).strip().lower().split())


def _find_column(columns: List[str], aliases: tuple) -> Optional[str]:
    for alias in aliases:
        if alias in columns:
            return alias
    return None


def parse_csv(file_bytes: bytes) -> Tuple[List[Transaction], dict]:
    """
    Parse and validate CSV bytes.

    Returns
    -------
    transactions : list[Transaction] – cleaned, in file order
    stats        : dict              – parse statistics and warnings

    Raises
    ------
    ValueError on fatal errors (unreadable CSV, missing columns, zero valid
    rows, too many rows).
    """
    stats: dict = {
        "total_rows": 0,
        "valid_rows": 0,
        "dropped_rows": 0,
        "self_transactions": 0,
        "warnings": [],
    }

    # 1. Decode & read ─────────────────────────────────────────────────────────
    text = _decode_bytes(file_bytes)

    # Comment lines ('#') and blank lines would otherwise become empty rows.
    cleaned_lines = [
        line for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    if not cleaned_lines:
        raise ValueError("CSV file is empty – no header or rows found.")

    # The header is read as an ordinary row so its width fixes the column
    # count: any data row with more fields is a ParserError, never an
    # implicit index that shifts every column right.
    try:
        raw = pd.read_csv(
            io.StringIO("\n".join(cleaned_lines)),
            header=None,
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            on_bad_lines="error",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ValueError(f"CSV parse error: {exc}") from exc

    header = raw.iloc[0].fillna("").tolist()
    df = raw.iloc[1:].reset_index(drop=True)

    stats["total_rows"] = len(df)
    log.info("CSV loaded: %d raw rows", len(df))

    if df.empty:
        raise ValueError("CSV file is empty – no rows found.")

    # 2. Locate sender / receiver columns ──────────────────────────────────────
    df.columns = [normalise_header(c) for c in header]
    df = df.loc[:, ~df.columns.duplicated()]
    columns = list(df.columns)
    sender_col = _find_column(columns, SENDER_ALIASES)
    receiver_col = _find_column(columns, RECEIVER_ALIASES)
    if sender_col is None or receiver_col is None:
        raise ValueError(
            "Missing sender/receiver columns. "
            f"Accepted sender headers: {list(SENDER_ALIASES)}; "
            f"accepted receiver headers: {list(RECEIVER_ALIASES)}. "
            f"Found: {sorted(columns)}"
        )

    df = df[[sender_col, receiver_col]].copy()
    df.columns = ["sender_id", "receiver_id"]

    # 3. Strip whitespace ──────────────────────────────────────────────────────
    # Short rows leave NaN in missing trailing fields.
    for col in ("sender_id", "receiver_id"):
        df[col] = df[col].fillna("").astype(str).str.strip()

    # 4. Drop empty-field rows ─────────────────────────────────────────────────
    mask_empty = df["sender_id"].eq("") | df["receiver_id"].eq("")
    n_empty = int(mask_empty.sum())
    if n_empty:
        stats["warnings"].append(f"Dropped {n_empty} rows with empty sender or receiver.")
        df = df[~mask_empty]

    if df.empty:
        raise ValueError(
            "No valid rows remain after validation. "
            f"Issues: {'; '.join(stats['warnings']) or 'unknown'}"
        )

    # 5. Row limit ─────────────────────────────────────────────────────────────
    if len(df) > MAX_ROWS:
        raise ValueError(
            f"Too many transactions: {len(df)} valid rows, maximum is {MAX_ROWS}."
        )

    # 6. Self-transactions are kept; cycle detection never turns them into rings.
    stats["self_transactions"] = int((df["sender_id"] == df["receiver_id"]).sum())
    if stats["self_transactions"]:
        stats["warnings"].append(
            f"Found {stats['self_transactions']} self-transactions."
        )

    transactions = [
        Transaction(sender_id=sender, receiver_id=receiver)
        for sender, receiver in df.itertuples(index=False, name=None)
    ]

    stats["valid_rows"] = len(transactions)
    stats["dropped_rows"] = stats["total_rows"] - len(transactions)
    log.info("Parse complete: %d valid / %d total rows", stats["valid_rows"], stats["total_rows"])
    return transactions, stats
