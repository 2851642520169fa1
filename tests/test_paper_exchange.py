import pytest

from src.surfer.core.models.enums import OrderStatus, Side
from src.surfer.core.settings import SurferParams
from src.surfer.exchanges.binance.exchange import BinanceSpotExchange
from src.surfer.exchanges.paper import PaperExchange
from src.surfer.exchanges.registry import build_exchange

from tests.conftest import FakeMarket, stat


@pytest.fixture
def paper(market_rows):
    return PaperExchange(FakeMarket(market_rows), secondary_symbol="USDT", start_balance=100)


def test_starts_with_secondary_balance_only(paper):
    assert paper.get_balances() == {"USDT": 100.0}
    assert paper.get_balance("AAA") == 0.0


def test_market_data_is_delegated(paper):
    assert paper.get_last_price("AAAUSDT") == 10.0
    assert "BBBUSDT" in paper.get_tradable_symbols()
    assert len(paper.get_candles("AAAUSDT", interval="1d", limit=5)) == 5


def test_buy_then_sell_moves_balances(paper):
    buy = paper.execute_market_order(Side.BUY, "AAAUSDT", 4)
    assert buy.is_filled
    assert paper.get_balance("AAA") == 4.0
    assert paper.get_balance("USDT") == pytest.approx(60.0)

    sell = paper.execute_market_order(Side.SELL, "AAAUSDT", 4)
    assert sell.is_filled
    assert paper.get_balance("USDT") == pytest.approx(100.0)
    assert paper.get_balances() == {"USDT": pytest.approx(100.0)}


@pytest.mark.parametrize(
    "side, qty",
    [(Side.BUY, 11), (Side.SELL, 1), (Side.BUY, 0)],
)
def test_unfundable_orders_are_rejected(paper, side, qty):
    r = paper.execute_market_order(side, "AAAUSDT", qty)
    assert r.status == OrderStatus.REJECTED.value
    assert not r.is_filled
    assert paper.get_balances() == {"USDT": 100.0}


def test_buy_spending_exact_balance_fills():
    # 3 * 0.1 is 0.30000000000000004 in binary floats
    paper = PaperExchange(FakeMarket([stat("AAAUSDT", 0.1, 1)]), secondary_symbol="USDT", start_balance=0.3)

    r = paper.execute_market_order(Side.BUY, "AAAUSDT", 3)
    assert r.is_filled
    assert paper.get_balance("AAA") == 3.0
    assert paper.get_balance("USDT") == 0.0
    assert paper.get_balances() == {"AAA": 3.0}


def test_build_exchange_picks_paper_in_simulation():
    assert isinstance(build_exchange(SurferParams(simulation=True)), PaperExchange)
    assert isinstance(build_exchange(SurferParams(simulation=False)), BinanceSpotExchange)
