"""params.py — Parsers for structured path and query parameters."""


class SymbolParseError(ValueError):
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"parse symbol error: {symbol!r}")


def split_symbol(symbol: str) -> tuple[str, str]:
    """Split a trading pair such as "BTC/USDT" into (base, quote)."""
    pair = symbol.split("/")
    if len(pair) != 2:
        raise SymbolParseError(symbol)
    return pair[0], pair[1]
