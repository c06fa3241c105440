from __future__ import annotations

"""
StratEval — 캐시플로우 (에퀴티 곡선)

거래 목록을 가격 시리즈에 재생하여 틱별 자산 배수(1.0 = 시작 자산)를 계산합니다.
생성 시 1회 계산되며 이후 불변입니다.

계산 규칙 (거래 순서대로):
    1. 거래 구간 시작 전까지는 직전 값을 그대로 유지 (포지션 없음)
    2. 구간 (lo, hi]의 각 틱:
        - 체결가 없음: value[lo] × close[i] / 기준가 (롱) 또는 × 기준가 / close[i] (숏)
          기준가 = lo 쪽 주문의 평균 종가. 청산 인덱스가 진입보다 앞서면
          방향을 뒤집어 value[hi] == value[lo] × 거래 수익 비율이 되도록 함
        - 체결가 지정: 거래 전체 수익 비율을 구간 전체에 동일 적용 (보간 없음)
    3. 마지막 거래 이후 시리즈 끝까지 직전 값 유지

Depends on:
    - src.core.series, src.core.trade, src.core.trading_record
    - numpy (값 배열), pandas (to_series)

Used by:
    - src.analysis.criteria (MaximumDrawDown, RewardRiskRatio)
    - src.analysis.analyzer
"""
from typing import Iterable

import numpy as np
import pandas as pd

from src.core.errors import IndexOutOfRangeError, InvalidArgumentError
from src.core.series import PriceSeries
from src.core.trade import Trade
from src.core.trading_record import TradingRecord, trades_of


class CashFlow:
    """
    틱별 자산 배수 시퀀스.

    사용법:
        cash_flow = CashFlow(series, record)
        cash_flow.value_at(series.end_index)    # 최종 누적 수익 배수
        cash_flow.to_series()                   # pd.Series (index = 절대 틱 인덱스)
    """

    def __init__(self, series: PriceSeries, trades: Trade | TradingRecord | Iterable[Trade]):
        self.series = series
        self._begin = series.begin_index

        values: list[float] = [] if series.is_empty else [1.0]
        for trade in trades_of(trades):
            if trade.is_closed():
                self._apply(values, trade)
        self._fill_to_end(values)

        arr = np.array(values, dtype=float)
        arr.setflags(write=False)
        self._values = arr

    def _apply(self, values: list[float], trade: Trade) -> None:
        series = self.series
        lo, hi = trade.span
        if lo < series.begin_index or hi > series.end_index:
            raise IndexOutOfRangeError(
                f"거래 구간 [{lo}, {hi}]이 시리즈 범위 "
                f"[{series.begin_index}, {series.end_index}]를 벗어남"
            )

        last = self._begin + len(values) - 1
        if lo < last:
            raise InvalidArgumentError(
                f"거래 구간 시작({lo})이 직전 거래 끝({last})보다 앞섭니다 (거래 겹침)"
            )

        # 포지션 없는 구간은 평탄하게 유지
        values.extend([values[-1]] * (lo - last))
        base = values[lo - self._begin]

        if trade.has_prices:
            values.extend([base * trade.return_ratio()] * (hi - lo))
            return

        entry_first = trade.entry.index <= trade.exit.index
        # 구간 시작(lo) 쪽 주문의 평균 종가가 기준가. 청산이 먼저 오면 방향이 뒤집힘
        if entry_first:
            reference = series.average_close_price(trade.entry_indexes)
            gains_on_rise = trade.entry_is_buy
        else:
            reference = series.average_close_price(trade.exit_indexes)
            gains_on_rise = not trade.entry_is_buy

        closes = series.closes[lo + 1 - self._begin:hi + 1 - self._begin]
        if gains_on_rise:
            ratios = closes / reference
        else:
            ratios = reference / closes
        values.extend((base * ratios).tolist())

    def _fill_to_end(self, values: list[float]) -> None:
        """시리즈 끝 인덱스까지 마지막 값으로 채움"""
        missing = self.series.tick_count - len(values)
        if missing > 0:
            values.extend([values[-1]] * missing)

    # ──────────────────────────────────────

    def value_at(self, index: int) -> float:
        """절대 틱 인덱스의 자산 배수"""
        if not self._begin <= index < self._begin + len(self._values):
            raise IndexOutOfRangeError(
                f"인덱스 {index}가 캐시플로우 범위 "
                f"[{self._begin}, {self._begin + len(self._values) - 1}]를 벗어남"
            )
        return float(self._values[index - self._begin])

    @property
    def values(self) -> np.ndarray:
        """읽기 전용 값 배열 (values[0] = begin_index의 값)"""
        return self._values

    @property
    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def to_series(self) -> pd.Series:
        return pd.Series(
            self._values,
            index=pd.RangeIndex(self._begin, self._begin + len(self._values), name="index"),
            name="cash_flow",
        )
