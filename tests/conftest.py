from __future__ import annotations

import pytest

from src.core.series import PriceSeries
from src.core.trade import Order, Trade
from src.core.trading_record import TradingRecord


def make_series(*closes: float) -> PriceSeries:
    """종가만으로 일봉 시리즈 생성 (2000-01-01부터)"""
    return PriceSeries.from_closes(list(closes))


def long_trade(entry: int, exit: int) -> Trade:
    return Trade(Order.buy_at(entry), Order.sell_at(exit))


def short_trade(entry: int, exit: int) -> Trade:
    return Trade(Order.sell_at(entry), Order.buy_at(exit))


def make_record(*pairs: tuple[int, int]) -> TradingRecord:
    """(진입, 청산) 쌍 순서대로 enter/exit 한 롱 원장"""
    record = TradingRecord()
    for entry, exit_ in pairs:
        record.enter(entry)
        record.exit(exit_)
    return record


@pytest.fixture
def drawdown_series() -> PriceSeries:
    """MDD 0.875 예제 시리즈"""
    return make_series(1, 2, 3, 6, 5, 20, 3)


@pytest.fixture
def drawdown_trades() -> list[Trade]:
    return [long_trade(0, 1), long_trade(3, 4), long_trade(5, 6)]
