from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping


class QuoteError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class PersistDeadlineError(TimeoutError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


# attribute name -> field name used by the quote API
_WIRE_NAMES = {
    "code": "code",
    "codein": "codein",
    "name": "name",
    "high": "high",
    "low": "low",
    "var_bid": "varBid",
    "pct_change": "pctChange",
    "bid": "bid",
    "ask": "ask",
    "timestamp": "timestamp",
    "create_date": "create_date",
}
_NUMERIC = {"high", "low", "var_bid", "pct_change", "bid", "ask"}


def parse_number(value: Any, field: str) -> float:
    """The quote API sends numbers as strings; accept both forms."""
    if isinstance(value, bool):
        raise QuoteError(f"'{field}' is not a number: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise QuoteError(f"'{field}' is not a number: {value!r}") from exc


@dataclass(frozen=True)
class Quote:
    code: str
    codein: str
    name: str
    high: float
    low: float
    var_bid: float
    pct_change: float
    bid: float
    ask: float
    timestamp: str
    create_date: str

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> Quote:
        values: dict[str, Any] = {}
        for attr, wire in _WIRE_NAMES.items():
            if wire not in payload:
                raise QuoteError(f"quote is missing '{wire}'")
            raw = payload[wire]
            if attr in _NUMERIC:
                values[attr] = parse_number(raw, wire)
            else:
                if not isinstance(raw, str):
                    raise QuoteError(f"'{wire}' should be a string")
                values[attr] = raw
        return cls(**values)

    def to_json(self) -> dict[str, str]:
        out = {}
        for attr, wire in _WIRE_NAMES.items():
            value = getattr(self, attr)
            out[wire] = format_number(value) if attr in _NUMERIC else value
        return out


def format_number(value: float) -> str:
    """Plain decimal notation, never exponent form: 1e-05 -> '0.00001'."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
