from __future__ import annotations

"""
StratEval — 평가 기준 (AnalysisCriterion)

(시리즈, 거래) → 스칼라 지표. 기준마다 선호 방향(better_than)이 다르며,
summarize()는 여러 슬라이스의 Decision을 하나로 이어 붙여 전체 시리즈에서 계산합니다.

공통 계약 (AnalysisCriterion Protocol):
    - calculate(series, trades): trades는 Trade / TradingRecord / Trade 시퀀스
    - better_than(v1, v2): v1이 v2보다 나은지
    - summarize(series, decisions): 모든 Decision 거래를 순서대로 이어 calculate

센티널 값 (예외 아님):
    - 거래 0건 → NumberOfTrades / AverageProfitableTrades / MaximumDrawDown = 0.0
    - 낙폭 0 → RewardRiskRatio = +inf

Depends on:
    - src.analysis.cash_flow (에퀴티 곡선)
    - src.analysis.slicer (Decision)
    - numpy (낙폭 계산)

Used by:
    - src.analysis.selection (choose_best)
    - src.analysis.analyzer (CriteriaAnalyzer)

Modification Guide:
    - 새 기준 추가: calculate/better_than/summarize 구현 클래스 작성
      + CRITERION_REGISTRY에 1줄 + (선택) settings.yaml analysis.criteria에 키 추가
"""
import math
from typing import Iterable, Protocol, Sequence, Union, runtime_checkable

import numpy as np

from src.analysis.cash_flow import CashFlow
from src.analysis.slicer import Decision, decision_trades
from src.core.errors import InvalidArgumentError
from src.core.series import PriceSeries
from src.core.trade import Trade
from src.core.trading_record import TradingRecord, trades_of

Trades = Union[Trade, TradingRecord, Iterable[Trade]]


@runtime_checkable
class AnalysisCriterion(Protocol):
    """평가 기준 인터페이스"""

    name: str

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        ...

    def better_than(self, value1: float, value2: float) -> bool:
        ...

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        ...


def maximum_drawdown(values: np.ndarray) -> float:
    """max((peak_i - value_j) / peak_i), peak_i = i까지의 누적 최고값"""
    if len(values) == 0:
        return 0.0
    peaks = np.maximum.accumulate(values)
    drawdowns = (peaks - values) / peaks
    return float(drawdowns.max())


def _closed(trades: Trades) -> list[Trade]:
    return [t for t in trades_of(trades) if t.is_closed()]


# ──────────────────────────────────────────────
# 거래 수 / 승률
# ──────────────────────────────────────────────

class NumberOfTradesCriterion:
    """청산된 거래 건수 (적을수록 좋음)"""

    name = "Number Of Trades"

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        # 단건 Trade는 상태와 무관하게 1건
        if isinstance(trades, Trade):
            return 1.0
        return float(len(_closed(trades)))

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 < value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


class AverageProfitableTradesCriterion:
    """수익 거래 비율: 수익 비율 > 1.0인 거래 / 청산된 전체 거래"""

    name = "Average Profitable Trades"

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        trades = _closed(trades)
        if not trades:
            return 0.0
        profitable = sum(1 for t in trades if t.return_ratio(series) > 1.0)
        return profitable / len(trades)

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 > value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


# ──────────────────────────────────────────────
# 낙폭 / 위험 대비 수익
# ──────────────────────────────────────────────

class MaximumDrawDownCriterion:
    """
    최대 낙폭 (낮을수록 좋음).

    거래들로 만든 CashFlow에서 첫 거래 시작 ~ 마지막 거래 끝 구간의
    최고점 대비 최대 하락률. 거래가 없거나 시리즈가 비면 0.0.
    """

    name = "Maximum Drawdown"

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        trades = _closed(trades)
        if series.is_empty or not trades:
            return 0.0
        return self._from_cash_flow(CashFlow(series, trades), trades)

    @staticmethod
    def _from_cash_flow(cash_flow: CashFlow, trades: list[Trade]) -> float:
        begin = cash_flow.series.begin_index
        lo = min(t.span[0] for t in trades)
        hi = max(t.span[1] for t in trades)
        return maximum_drawdown(cash_flow.values[lo - begin:hi - begin + 1])

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 < value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


class RewardRiskRatioCriterion:
    """
    위험 대비 수익 = 최종 CashFlow 값 / 최대 낙폭 (높을수록 좋음).

    낙폭이 정확히 0이면 (수익만 있거나 거래 없음) +inf.
    """

    name = "Reward Risk Ratio"

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        trades = _closed(trades)
        if series.is_empty or not trades:
            return math.inf
        cash_flow = CashFlow(series, trades)
        drawdown = MaximumDrawDownCriterion._from_cash_flow(cash_flow, trades)
        if drawdown == 0.0:
            return math.inf
        return cash_flow.value_at(series.end_index) / drawdown

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 > value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


# ──────────────────────────────────────────────
# 수익 / 비용
# ──────────────────────────────────────────────

class TotalProfitCriterion:
    """누적 수익 배수 — 거래별 수익 비율의 곱 (거래 없으면 1.0)"""

    name = "Total Profit"

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        return float(math.prod(t.return_ratio(series) for t in trades_of(trades)))

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 > value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


class LinearTransactionCostCriterion:
    """
    선형 거래 비용 (낮을수록 좋음).

    주문당 비용 = a × 거래금액 + b. 거래금액은 initial_amount에서 시작해
    직전 비용을 뺀 뒤 거래 수익 비율만큼 복리로 갱신됩니다.
    주문에 amount가 지정되어 있으면 그 값을 거래금액으로 사용합니다.
    """

    name = "Linear Transaction Cost"

    def __init__(self, initial_amount: float, a: float, b: float = 0.0):
        self.initial_amount = initial_amount
        self.a = a
        self.b = b

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        if isinstance(trades, Trade):
            return self._trade_cost(series, trades, self.initial_amount)

        total_cost = 0.0
        traded_amount = self.initial_amount
        for trade in trades_of(trades):
            trade_cost = self._trade_cost(series, trade, traded_amount)
            total_cost += trade_cost
            traded_amount = (traded_amount - trade_cost) * trade.return_ratio(series)

        # 진행 중 거래는 진입 주문 비용만 반영
        if isinstance(trades, TradingRecord) and trades.current_trade.is_opened():
            entry = trades.current_trade.entry
            amount = entry.amount if entry.amount is not None else traded_amount
            total_cost += self._order_cost(amount)
        return total_cost

    def _order_cost(self, traded_amount: float) -> float:
        return self.a * traded_amount + self.b

    def _trade_cost(self, series: PriceSeries, trade: Trade, traded_amount: float) -> float:
        if trade.entry is None:
            return 0.0

        entry = trade.entry
        cost = self._order_cost(entry.amount if entry.amount is not None else traded_amount)
        if trade.exit is not None:
            new_amount = (traded_amount - cost) * trade.return_ratio(series)
            exit_ = trade.exit
            cost += self._order_cost(exit_.amount if exit_.amount is not None else new_amount)
        return cost

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 < value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


class BuyAndHoldCriterion:
    """
    매수 후 보유 수익 배수 (비교 기준선).

    시리즈 전체: close[end] / close[begin]. Trade 단건: 해당 거래 구간을 보유했을 때.
    """

    name = "Buy And Hold"

    def calculate(self, series: PriceSeries, trades: Trades) -> float:
        if isinstance(trades, Trade):
            if not trades.is_closed():
                return 1.0
            entry = series.close_price(trades.entry.index)
            exit_ = series.close_price(trades.exit.index)
            return exit_ / entry if trades.entry_is_buy else entry / exit_
        if series.is_empty:
            return 1.0
        return series.close_price(series.end_index) / series.close_price(series.begin_index)

    def better_than(self, value1: float, value2: float) -> bool:
        return value1 > value2

    def summarize(self, series: PriceSeries, decisions: Sequence[Decision]) -> float:
        return self.calculate(series, decision_trades(decisions))

    def __str__(self) -> str:
        return self.name


CRITERION_REGISTRY: dict[str, type] = {
    "number_of_trades": NumberOfTradesCriterion,
    "average_profitable_trades": AverageProfitableTradesCriterion,
    "maximum_drawdown": MaximumDrawDownCriterion,
    "reward_risk_ratio": RewardRiskRatioCriterion,
    "total_profit": TotalProfitCriterion,
    "linear_transaction_cost": LinearTransactionCostCriterion,
    "buy_and_hold": BuyAndHoldCriterion,
}


def resolve_criterion(key: str, **kwargs) -> AnalysisCriterion:
    """레지스트리 키로 평가 기준 인스턴스 생성"""
    cls = CRITERION_REGISTRY.get(key)
    if cls is None:
        available = ", ".join(CRITERION_REGISTRY)
        raise InvalidArgumentError(f"알 수 없는 평가 기준: {key} (사용 가능: {available})")
    return cls(**kwargs)
