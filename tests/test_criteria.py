from __future__ import annotations

"""평가 기준 테스트: 거래 수, 수익 거래 비율, MDD, 위험 대비 수익, 총 수익, 거래 비용, 매수 후 보유"""

import math

import numpy as np
import pytest

from conftest import long_trade, make_record, make_series, short_trade
from src.analysis.criteria import (
    CRITERION_REGISTRY,
    AnalysisCriterion,
    AverageProfitableTradesCriterion,
    BuyAndHoldCriterion,
    LinearTransactionCostCriterion,
    MaximumDrawDownCriterion,
    NumberOfTradesCriterion,
    RewardRiskRatioCriterion,
    TotalProfitCriterion,
    maximum_drawdown,
    resolve_criterion,
)
from src.analysis.slicer import Decision, RegularSlicer, TimeSeriesSlicer
from src.core.errors import IndexOutOfRangeError, InvalidArgumentError
from src.core.series import PriceSeries
from src.core.trade import Order, Trade
from src.core.trading_record import TradingRecord


def _opened_trade(index: int) -> Trade:
    trade = Trade()
    trade.operate(index)
    return trade


# ──────────────────────────────────────────────
# NumberOfTrades
# ──────────────────────────────────────────────

class TestNumberOfTrades:
    criterion = NumberOfTradesCriterion()

    def test_no_trades(self):
        """거래 0건 → 0"""
        assert self.criterion.calculate(make_series(100, 105, 110), []) == 0.0

    def test_two_trades(self):
        """청산된 거래 2건"""
        series = make_series(100, 105, 110, 100, 95, 105)
        assert self.criterion.calculate(series, [long_trade(0, 2), long_trade(3, 5)]) == 2.0

    def test_single_trade_counts_as_one(self):
        """단건 Trade는 상태와 무관하게 1"""
        assert self.criterion.calculate(None, Trade()) == 1.0
        assert self.criterion.calculate(None, long_trade(0, 1)) == 1.0

    def test_record_counts_closed_trades(self):
        """원장의 진행 중 거래는 세지 않음"""
        record = make_record((0, 1), (2, 3))
        record.enter(4)
        assert self.criterion.calculate(make_series(1, 2, 3, 4, 5), record) == 2.0

    def test_list_skips_unclosed_trades(self):
        """목록 입력도 NEW/진행 중 거래는 제외"""
        trades = [long_trade(0, 1), Trade(), _opened_trade(2)]
        assert self.criterion.calculate(make_series(1, 2, 3), trades) == 1.0

    def test_better_than(self):
        """적을수록 좋음"""
        assert self.criterion.better_than(3, 6)
        assert not self.criterion.better_than(7, 4)


# ──────────────────────────────────────────────
# AverageProfitableTrades
# ──────────────────────────────────────────────

class TestAverageProfitableTrades:
    criterion = AverageProfitableTradesCriterion()
    series = make_series(100, 95, 102, 105, 97, 113)

    def test_ratio_of_profitable_trades(self):
        """수익 2건 / 전체 3건"""
        record = make_record((0, 2), (3, 4), (4, 5))
        assert self.criterion.calculate(self.series, record) == pytest.approx(2 / 3)

    def test_single_trade(self):
        """단건: 수익이면 1, 손실이면 0"""
        assert self.criterion.calculate(self.series, long_trade(0, 2)) == 1.0
        assert self.criterion.calculate(self.series, long_trade(0, 1)) == 0.0

    def test_short_trade_profit(self):
        """숏은 하락 시 수익"""
        assert self.criterion.calculate(self.series, short_trade(3, 4)) == 1.0

    def test_fixed_prices(self):
        """체결가 기준 손실 거래"""
        trade = Trade(Order.buy_at(0, price=10.0), Order.sell_at(1, price=9.0))
        assert self.criterion.calculate(self.series, trade) == 0.0

    def test_no_trades_is_zero(self):
        """거래 0건 → 0.0"""
        assert self.criterion.calculate(self.series, TradingRecord()) == 0.0

    def test_unclosed_trades_not_in_denominator(self):
        """NEW/진행 중 거래는 분모에서 제외"""
        trades = [long_trade(0, 2), Trade(), _opened_trade(3)]
        assert self.criterion.calculate(self.series, trades) == 1.0

    def test_better_than(self):
        """높을수록 좋음"""
        assert self.criterion.better_than(0.7, 0.5)
        assert not self.criterion.better_than(0.4, 0.5)


# ──────────────────────────────────────────────
# MaximumDrawDown
# ──────────────────────────────────────────────

class TestMaximumDrawDown:
    criterion = MaximumDrawDownCriterion()

    def test_no_trades(self, drawdown_series):
        """거래 0건 → 0.0"""
        assert self.criterion.calculate(drawdown_series, []) == 0.0

    def test_empty_series(self):
        """빈 시리즈 → 0.0"""
        assert self.criterion.calculate(PriceSeries([]), []) == 0.0

    def test_only_gains(self):
        """수익 거래만 → 0.0"""
        series = make_series(1, 2, 3, 6, 8, 20, 3)
        assert self.criterion.calculate(series, [long_trade(0, 1), long_trade(2, 5)]) == 0.0

    def test_drawdown(self, drawdown_series, drawdown_trades):
        """최고 2.0 → 최저 0.25: 0.875"""
        assert self.criterion.calculate(drawdown_series, drawdown_trades) == pytest.approx(0.875)

    def test_trades_that_sell_before_buying(self):
        """숏 포함: 1.0 → 0.09 낙폭 0.91"""
        series = make_series(2, 1, 3, 5, 6, 3, 20)
        trades = [long_trade(0, 1), long_trade(3, 4), short_trade(5, 6)]
        assert self.criterion.calculate(series, trades) == pytest.approx(0.91)

    def test_simple_chained_trades(self):
        """연속 거래 10 → 1: 0.9"""
        series = make_series(1, 10, 5, 6, 1)
        trades = [long_trade(0, 1), long_trade(1, 2), long_trade(2, 3), long_trade(3, 4)]
        assert self.criterion.calculate(series, trades) == pytest.approx(0.9)

    def test_trade_beyond_series_raises(self):
        """시리즈 밖 인덱스 거래는 IndexOutOfRangeError"""
        series = make_series(1, 10, 5, 6, 1)
        trades = [long_trade(0, 1), long_trade(1, 2), long_trade(2, 3),
                  long_trade(3, 4), long_trade(4, 5)]
        with pytest.raises(IndexOutOfRangeError):
            self.criterion.calculate(series, trades)

    def test_constrained_series(self):
        """제한 뷰 [4, 8]에서도 0.9"""
        base = make_series(1, 1, 1, 1, 1, 10, 5, 6, 1, 1, 1)
        view = base.constrain(4, 8)
        trades = [long_trade(4, 5), long_trade(5, 6), long_trade(6, 7), long_trade(7, 8)]
        assert self.criterion.calculate(view, trades) == pytest.approx(0.9)

    def test_record(self, drawdown_series):
        """원장 입력도 동일 결과"""
        record = make_record((0, 1), (3, 4), (5, 6))
        assert self.criterion.calculate(drawdown_series, record) == pytest.approx(0.875)

    def test_short_with_exit_before_entry(self):
        """청산 인덱스가 앞선 숏도 수익 비율대로 곡선 반영 (낙폭 없음)"""
        series = make_series(40, 20, 40)
        trade = Trade(Order.sell_at(2), Order.buy_at(1))
        assert self.criterion.calculate(series, trade) == 0.0
        losing = Trade(Order.sell_at(1), Order.buy_at(0))   # 40에 되사고 20에 판 숏
        assert self.criterion.calculate(series, losing) == pytest.approx(0.5)

    def test_summarize_single_slice(self, drawdown_series, drawdown_trades):
        """한 구간 Decision 3개 집계 → 0.875"""
        slicer = RegularSlicer(drawdown_series, period="Y")
        assert slicer.number_of_slices() == 1
        decisions = [Decision(slicer.slice(0), [trade]) for trade in drawdown_trades]
        assert self.criterion.summarize(drawdown_series, decisions) == pytest.approx(0.875)

    def test_summarize_matches_trade_boundaries(self, drawdown_series, drawdown_trades):
        """거래별 구간으로 나눠도 전체 계산과 같음"""
        slicer = TimeSeriesSlicer(drawdown_series, [(0, 2), (3, 4), (5, 6)])
        decisions = [Decision(slicer.slice(i), [trade], index=i)
                     for i, trade in enumerate(drawdown_trades)]
        assert self.criterion.summarize(drawdown_series, decisions) == pytest.approx(
            self.criterion.calculate(drawdown_series, drawdown_trades)
        )

    def test_better_than(self):
        """낮을수록 좋음"""
        assert self.criterion.better_than(0.1, 0.2)
        assert not self.criterion.better_than(0.3, 0.2)

    def test_maximum_drawdown_helper(self):
        """누적 최고점 대비 최대 하락률"""
        assert maximum_drawdown(np.array([])) == 0.0
        assert maximum_drawdown(np.array([1.0, 2.0, 1.0, 3.0, 2.4])) == pytest.approx(0.5)


# ──────────────────────────────────────────────
# RewardRiskRatio
# ──────────────────────────────────────────────

class TestRewardRiskRatio:
    criterion = RewardRiskRatioCriterion()

    def test_reward_risk_ratio(self):
        """최종 값 / ((최고 - 최저) / 최고)"""
        series = make_series(100, 105, 95, 100, 90, 95, 80, 120)
        record = make_record((0, 1), (2, 4), (5, 7))

        total_profit = (105 / 100) * (90 / 95) * (120 / 95)
        peak = (105 / 100) * (100 / 95)
        low = (105 / 100) * (90 / 95) * (80 / 95)

        assert self.criterion.calculate(series, record) == pytest.approx(
            total_profit / ((peak - low) / peak)
        )

    def test_only_gains_is_infinite(self):
        """수익만 → +inf"""
        series = make_series(1, 2, 3, 6, 8, 20, 3)
        record = make_record((0, 1), (2, 5))
        assert math.isinf(self.criterion.calculate(series, record))

    def test_no_trades_is_infinite(self):
        """거래 0건 → +inf"""
        series = make_series(1, 2, 3, 6, 8, 20, 3)
        assert self.criterion.calculate(series, TradingRecord()) == math.inf

    def test_infinite_whenever_drawdown_is_zero(self):
        """MDD == 0 이면 항상 +inf"""
        series = make_series(1, 2, 3, 6, 8, 20, 3)
        mdd = MaximumDrawDownCriterion()
        for trades in ([], [long_trade(0, 1)], [long_trade(0, 1), long_trade(2, 5)]):
            assert mdd.calculate(series, trades) == 0.0
            assert self.criterion.calculate(series, trades) == math.inf

    def test_with_one_trade(self):
        """단건 손실 거래: 0.95 / 0.05"""
        series = make_series(100, 95, 95, 100, 90, 95, 80, 120)
        assert self.criterion.calculate(series, long_trade(0, 1)) == pytest.approx(
            (95 / 100) / (1 - 0.95)
        )

    def test_short_with_exit_before_entry_agrees_with_total_profit(self):
        """청산 인덱스가 앞선 숏: 최종 값이 TotalProfit과 같음"""
        series = make_series(10, 20, 40, 30)
        trade = Trade(Order.sell_at(2), Order.buy_at(1))
        total_profit = TotalProfitCriterion().calculate(series, trade)
        assert total_profit == pytest.approx(2.0)
        assert math.isinf(self.criterion.calculate(series, trade))

        losing = Trade(Order.sell_at(3), Order.buy_at(2))   # 40에 되사고 30에 판 숏
        drawdown = MaximumDrawDownCriterion().calculate(series, losing)
        assert drawdown == pytest.approx(0.25)
        assert self.criterion.calculate(series, losing) == pytest.approx(0.75 / 0.25)

    def test_better_than(self):
        """높을수록 좋음"""
        assert self.criterion.better_than(3.5, 2.2)
        assert not self.criterion.better_than(1.5, 2.7)


# ──────────────────────────────────────────────
# TotalProfit
# ──────────────────────────────────────────────

class TestTotalProfit:
    criterion = TotalProfitCriterion()

    def test_only_gains(self):
        """1.10 × 1.05"""
        series = make_series(100, 105, 110, 100, 95, 105)
        record = make_record((0, 2), (3, 5))
        assert self.criterion.calculate(series, record) == pytest.approx(1.10 * 1.05)

    def test_only_losses(self):
        """0.95 × 0.7"""
        series = make_series(100, 95, 100, 80, 85, 70)
        record = make_record((0, 1), (2, 5))
        assert self.criterion.calculate(series, record) == pytest.approx(0.95 * 0.7)

    def test_trades_that_start_selling(self):
        """숏 2건: (1/0.95) × (1/0.7)"""
        series = make_series(100, 95, 100, 80, 85, 70)
        record = TradingRecord.from_orders(Order.sell_at(0), Order.buy_at(1),
                                           Order.sell_at(2), Order.buy_at(5))
        assert self.criterion.calculate(series, record) == pytest.approx((1 / 0.95) * (1 / 0.7))

    def test_no_trades(self):
        """거래 0건 → 1.0"""
        series = make_series(100, 95, 100)
        assert self.criterion.calculate(series, TradingRecord()) == 1.0

    def test_open_trade(self):
        """NEW/진행 중 거래 → 1.0"""
        series = make_series(100, 95, 100)
        trade = Trade()
        assert self.criterion.calculate(series, trade) == 1.0
        trade.operate(0)
        assert self.criterion.calculate(series, trade) == 1.0

    def test_better_than(self):
        """높을수록 좋음"""
        assert self.criterion.better_than(2.0, 1.5)
        assert not self.criterion.better_than(1.5, 2.0)


# ──────────────────────────────────────────────
# LinearTransactionCost
# ──────────────────────────────────────────────

class TestLinearTransactionCost:
    criterion = LinearTransactionCostCriterion(1000, 0.005, 0.2)
    series = make_series(100, 150, 200, 100, 50, 100)

    @staticmethod
    def _cost(amount: float) -> float:
        return 0.005 * amount + 0.2

    def _trade_cost(self, amount: float, ratio: float) -> float:
        entry_cost = self._cost(amount)
        return entry_cost + self._cost((amount - entry_cost) * ratio)

    def test_single_trade(self):
        """진입 비용 + 수익 반영 금액의 청산 비용"""
        expected = self._trade_cost(1000, 1.5)
        assert self.criterion.calculate(self.series, long_trade(0, 1)) == pytest.approx(expected)

    def test_record_compounds_traded_amount(self):
        """다음 거래 금액 = (직전 금액 - 비용) × 수익 비율"""
        record = make_record((0, 1), (2, 4))
        first = self._trade_cost(1000, 1.5)
        amount = (1000 - first) * 1.5
        second = self._trade_cost(amount, 0.25)
        assert self.criterion.calculate(self.series, record) == pytest.approx(first + second)

    def test_open_trade_adds_entry_cost(self):
        """원장의 진행 중 거래는 진입 비용만 추가"""
        record = make_record((0, 1))
        record.enter(2)
        first = self._trade_cost(1000, 1.5)
        amount = (1000 - first) * 1.5
        assert self.criterion.calculate(self.series, record) == pytest.approx(
            first + self._cost(amount)
        )

    def test_order_amounts_override(self):
        """주문에 amount가 있으면 그 금액으로 비용 계산"""
        trade = Trade(Order.buy_at(0, amount=200), Order.sell_at(1, amount=300))
        assert self.criterion.calculate(self.series, trade) == pytest.approx(
            self._cost(200) + self._cost(300)
        )

    def test_new_trade_has_no_cost(self):
        """주문 없는 거래는 비용 0"""
        assert self.criterion.calculate(self.series, Trade()) == 0.0

    def test_better_than(self):
        """낮을수록 좋음"""
        assert self.criterion.better_than(3.1, 4.2)
        assert not self.criterion.better_than(2.1, 1.9)


# ──────────────────────────────────────────────
# BuyAndHold
# ──────────────────────────────────────────────

class TestBuyAndHold:
    criterion = BuyAndHoldCriterion()
    series = make_series(100, 105, 110, 100, 95, 105)

    def test_whole_series(self):
        """close[end] / close[begin]"""
        assert self.criterion.calculate(self.series, make_record((0, 2))) == pytest.approx(1.05)

    def test_single_trade(self):
        """단건: 거래 구간을 같은 방향으로 보유"""
        assert self.criterion.calculate(self.series, long_trade(0, 2)) == pytest.approx(1.10)
        assert self.criterion.calculate(self.series, short_trade(0, 2)) == pytest.approx(100 / 110)

    def test_empty_series(self):
        """빈 시리즈 → 1.0"""
        assert self.criterion.calculate(PriceSeries([]), []) == 1.0

    def test_constrained_series(self):
        """뷰 구간의 처음/끝 종가 기준"""
        view = self.series.constrain(1, 3)
        assert self.criterion.calculate(view, []) == pytest.approx(100 / 105)


# ──────────────────────────────────────────────
# Registry / Protocol
# ──────────────────────────────────────────────

class TestCriterionRegistry:
    def test_resolve(self):
        """키로 인스턴스 생성 (생성자 인자 전달)"""
        assert isinstance(resolve_criterion("maximum_drawdown"), MaximumDrawDownCriterion)
        cost = resolve_criterion("linear_transaction_cost", initial_amount=100, a=0.01)
        assert cost.initial_amount == 100
        assert cost.b == 0.0

    def test_resolve_unknown(self):
        """미등록 키는 InvalidArgumentError"""
        with pytest.raises(InvalidArgumentError):
            resolve_criterion("sharpe")

    def test_all_criteria_follow_protocol(self):
        """레지스트리의 모든 기준이 AnalysisCriterion 계약을 만족"""
        for key, cls in CRITERION_REGISTRY.items():
            kwargs = {"initial_amount": 1000, "a": 0.01} if key == "linear_transaction_cost" else {}
            assert isinstance(cls(**kwargs), AnalysisCriterion)

    def test_names(self):
        """str()은 사람이 읽는 이름"""
        assert str(RewardRiskRatioCriterion()) == "Reward Risk Ratio"
        assert str(BuyAndHoldCriterion()) == "Buy And Hold"
        assert str(NumberOfTradesCriterion()) == "Number Of Trades"
