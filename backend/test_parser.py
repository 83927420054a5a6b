"""
CSV parser tests — quoting, header aliases and rejection paths.
"""
import pytest

import ringwatch.parser as parser_module
from ringwatch.parser import normalise_header, parse_csv


def as_bytes(*lines):
    return ("\n".join(lines) + "\n").encode("utf-8")


def pairs(transactions):
    return [(t.sender_id, t.receiver_id) for t in transactions]


def test_basic_rows_and_extra_columns():
    data = as_bytes(
        "transaction_id,sender_id,receiver_id,amount,timestamp",
        "T1,ACC_A,ACC_B,100,2024-01-01 10:00:00",
        "T2,ACC_B,ACC_C,90,2024-01-01 11:00:00",
    )
    transactions, stats = parse_csv(data)
    assert pairs(transactions) == [("ACC_A", "ACC_B"), ("ACC_B", "ACC_C")]
    assert stats["total_rows"] == 2
    assert stats["valid_rows"] == 2
    assert stats["dropped_rows"] == 0
    assert stats["warnings"] == []


def test_quoted_fields():
    data = as_bytes(
        'sender_id,receiver_id,memo',
        '"ACC ""X""","Smith, John","a, b"',
    )
    transactions, _ = parse_csv(data)
    assert pairs(transactions) == [('ACC "X"', "Smith, John")]


@pytest.mark.parametrize("header", [
    "Sender ID,Receiver ID",
    "  SENDER_ID , receiver_id ",
    "from,to",
    "Source Account,Target Account",
    "sender,destination",
])
def test_header_aliases(header):
    transactions, _ = parse_csv(as_bytes(header, "A,B"))
    assert pairs(transactions) == [("A", "B")]


def test_normalise_header():
    assert normalise_header("  Sender \t ID ") == "sender_id"


def test_values_are_stripped_and_empty_rows_dropped():
    data = as_bytes(
        "sender_id,receiver_id",
        "  A  , B ",
        ",C",
        "D,",
    )
    transactions, stats = parse_csv(data)
    assert pairs(transactions) == [("A", "B")]
    assert stats["dropped_rows"] == 2
    assert "Dropped 2 rows" in stats["warnings"][0]


def test_comment_and_blank_lines_ignored():
    data = as_bytes(
        "# exported ledger",
        "sender_id,receiver_id",
        "",
        "# cycle section",
        "A,B",
    )
    transactions, stats = parse_csv(data)
    assert pairs(transactions) == [("A", "B")]
    assert stats["total_rows"] == 1


def test_self_transactions_kept_and_counted():
    transactions, stats = parse_csv(as_bytes("sender_id,receiver_id", "A,A", "A,B"))
    assert pairs(transactions) == [("A", "A"), ("A", "B")]
    assert stats["self_transactions"] == 1


def test_latin1_fallback():
    data = "sender_id,receiver_id\nJos\xe9,B\n".encode("latin-1")
    transactions, _ = parse_csv(data)
    assert pairs(transactions) == [("José", "B")]


def test_empty_file_rejected():
    with pytest.raises(ValueError, match="empty"):
        parse_csv(b"")


def test_header_only_rejected():
    with pytest.raises(ValueError, match="empty"):
        parse_csv(as_bytes("sender_id,receiver_id"))


def test_missing_columns_rejected():
    with pytest.raises(ValueError, match="Missing sender/receiver columns"):
        parse_csv(as_bytes("payer,amount", "A,10"))


def test_no_valid_rows_rejected():
    with pytest.raises(ValueError, match="No valid rows"):
        parse_csv(as_bytes("sender_id,receiver_id", ",B", "A,"))


def test_row_limit(monkeypatch):
    monkeypatch.setattr(parser_module, "MAX_ROWS", 2)
    with pytest.raises(ValueError, match="Too many transactions"):
        parse_csv(as_bytes("sender_id,receiver_id", "A,B", "B,C", "C,A"))


def test_rows_wider_than_header_rejected():
    with pytest.raises(ValueError, match="CSV parse error"):
        parse_csv(b"sender_id,receiver_id\nA,B,X\nC,D,Y\n")


def test_single_wide_row_rejected():
    with pytest.raises(ValueError, match="CSV parse error"):
        parse_csv(as_bytes("sender_id,receiver_id", "A,B", "C,D,Y"))


def test_trailing_comma_on_every_line():
    transactions, _ = parse_csv(as_bytes("sender_id,receiver_id,", "A,B,", "C,D,"))
    assert pairs(transactions) == [("A", "B"), ("C", "D")]
