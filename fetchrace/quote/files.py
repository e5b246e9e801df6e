from pathlib import Path


def quote_line(bid: float) -> str:
    return f"Dólar: {bid:.2f}\n"


def append_quote(path: str | Path, bid: float) -> None:
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(quote_line(bid))


def write_quote(path: str | Path, bid: float) -> None:
    Path(path).write_text(quote_line(bid), encoding="utf-8")
