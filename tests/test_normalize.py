import pytest

from src.surfer.core.errors import DataError
from src.surfer.core.market.normalize import (
    MarketSnapshot,
    is_leveraged_symbol,
    market_average_price,
    normalize_ticker_stats,
)

from tests.conftest import snap, stat


def test_keeps_only_secondary_quoted_non_leveraged(market_rows):
    rows = market_rows + [stat("ETHDOWNUSDT", 3, -20)]
    tickers = normalize_ticker_stats(rows, "USDT")

    assert [t.primary_symbol for t in tickers] == ["BTC", "AAA", "BBB", "CCC"]
    assert all(t.secondary_symbol == "USDT" for t in tickers)
    assert tickers[1].ticker_name == "AAAUSDT"
    assert tickers[1].last_price == 10.0
    assert tickers[1].price_change_percent == 12.0
    assert tickers[1].open_time == 1700000000000


def test_secondary_symbol_is_case_insensitive():
    tickers = normalize_ticker_stats([stat("XRPUSDT", 0.5, 2)], "usdt")
    assert tickers[0].primary_symbol == "XRP"


def test_malformed_number_raises_data_error():
    with pytest.raises(DataError) as ei:
        normalize_ticker_stats([stat("AAAUSDT", "abc", 1)], "USDT")
    assert ei.value.operation == "Normalize Ticker Stats"
    assert ei.value.payload["symbol"] == "AAAUSDT"


def test_missing_number_raises_data_error():
    with pytest.raises(DataError):
        normalize_ticker_stats([{"symbol": "AAAUSDT", "lastPrice": "1"}], "USDT")


def test_malformed_rows_of_other_quotes_are_ignored():
    tickers = normalize_ticker_stats([stat("ETHBTC", "oops", "x"), stat("AAAUSDT", 1, 1)], "USDT")
    assert [t.primary_symbol for t in tickers] == ["AAA"]


def test_leveraged_suffix():
    assert is_leveraged_symbol("BTCUP")
    assert is_leveraged_symbol("ETHDOWN")
    assert not is_leveraged_symbol("BTC")


def test_market_average_subtracts_reference_price():
    tickers = [snap("BTC", 100, 1), snap("AAA", 10, 2), snap("BBB", 20, 3)]
    assert market_average_price(tickers, 100) == pytest.approx(10.0)


def test_market_average_empty_is_zero():
    assert market_average_price([], 100) == 0.0


def test_snapshot_find_and_tradable():
    s = MarketSnapshot(
        tickers=[snap("AAA", 1, 1), snap("BBB", 2, 2)],
        tradable_symbols=frozenset({"BBBUSDT"}),
        reference_price=100,
    )
    assert s.find("AAA").ticker_name == "AAAUSDT"
    assert s.find("ZZZ") is None
    assert s.find(None) is None
    assert [t.primary_symbol for t in s.tradable()] == ["BBB"]
