from __future__ import annotations

"""
StratEval — 시리즈 슬라이서 / Decision

시리즈를 연속되고 겹치지 않는 구간(window)으로 나누고,
각 구간에서 실행된 거래를 Decision으로 묶어 구간 간 집계(summarize)에 사용합니다.

불변 조건 (생성 시 검증, 위반 시 InvalidArgumentError):
    - 첫 구간은 시리즈 begin_index에서 시작, 마지막 구간은 end_index에서 끝
    - 구간 i의 end + 1 == 구간 i+1의 begin (빈틈/겹침 없음)

슬라이서 종류:
    - TimeSeriesSlicer: 구간 목록 직접 지정
    - RegularSlicer: 달력 주기(pandas period alias: Y/Q/M/W/D)별 구간
    - CountSlicer: N개의 균등 구간

Depends on:
    - src.core.series (ConstrainedSeries 뷰)
    - src.core.config (analysis.slicer.period 기본 주기)
    - numpy (균등 분할), pandas (주기 변환)

Used by:
    - src.analysis.criteria (summarize)
    - src.analysis.analyzer (slice_table)
"""
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import numpy as np
from loguru import logger

from src.core.config import get_config
from src.core.errors import IndexOutOfRangeError, InvalidArgumentError
from src.core.series import ConstrainedSeries, PriceSeries
from src.core.trade import Trade
from src.core.trading_record import TradingRecord


@dataclass
class Decision:
    """슬라이스 1개와 그 구간에서 실행된 거래"""
    series: PriceSeries
    trades: list[Trade] = field(default_factory=list)
    index: int | None = None     # 슬라이서 내 구간 번호

    @classmethod
    def from_record(cls, series: PriceSeries, record: TradingRecord,
                    index: int | None = None) -> Decision:
        """원장의 청산된 거래로 Decision 생성"""
        return cls(series=series, trades=record.trades, index=index)


def decision_trades(decisions: Sequence[Decision]) -> list[Trade]:
    """모든 Decision의 거래를 순서대로 이어 붙임"""
    trades: list[Trade] = []
    for decision in decisions:
        trades.extend(decision.trades)
    return trades


class TimeSeriesSlicer:
    """
    구간 목록 기반 슬라이서.

    사용법:
        slicer = TimeSeriesSlicer(series, [(0, 2), (3, 6)])
        slicer.number_of_slices()       # 2
        view = slicer.slice(1)          # 인덱스 3~6 뷰
    """

    def __init__(self, series: PriceSeries, windows: Sequence[tuple[int, int]]):
        self.series = series
        self._windows: list[tuple[int, int]] = [(int(b), int(e)) for b, e in windows]
        self._validate()

    def _validate(self) -> None:
        series = self.series
        if series.is_empty:
            if self._windows:
                raise InvalidArgumentError("빈 시리즈에는 구간을 지정할 수 없습니다")
            return
        if not self._windows:
            raise InvalidArgumentError("구간이 비어 있습니다")

        expected_begin = series.begin_index
        for begin, end in self._windows:
            if begin > end:
                raise InvalidArgumentError(f"잘못된 구간 [{begin}, {end}]")
            if begin != expected_begin:
                kind = "겹침" if begin < expected_begin else "빈틈"
                raise InvalidArgumentError(
                    f"구간 [{begin}, {end}] 시작이 {expected_begin}이어야 합니다 ({kind})"
                )
            expected_begin = end + 1

        if expected_begin - 1 != series.end_index:
            raise InvalidArgumentError(
                f"구간이 시리즈 끝({series.end_index})까지 덮지 않습니다 "
                f"(마지막 구간 끝: {expected_begin - 1})"
            )

    @property
    def windows(self) -> list[tuple[int, int]]:
        return list(self._windows)

    def number_of_slices(self) -> int:
        return len(self._windows)

    def __len__(self) -> int:
        return len(self._windows)

    def slice(self, i: int) -> ConstrainedSeries:
        """i번째 구간 뷰"""
        if not 0 <= i < len(self._windows):
            raise IndexOutOfRangeError(
                f"슬라이스 번호 {i}가 범위 [0, {len(self._windows) - 1}]를 벗어남"
            )
        begin, end = self._windows[i]
        return self.series.constrain(begin, end)

    def __iter__(self) -> Iterator[ConstrainedSeries]:
        for i in range(len(self._windows)):
            yield self.slice(i)

    def decisions(self, records: Sequence[TradingRecord]) -> list[Decision]:
        """구간별 원장 1개씩 → Decision 목록"""
        if len(records) != len(self._windows):
            raise InvalidArgumentError(
                f"원장 수({len(records)})와 구간 수({len(self._windows)})가 다릅니다"
            )
        return [
            Decision.from_record(self.slice(i), record, index=i)
            for i, record in enumerate(records)
        ]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(slices={len(self._windows)})"


class RegularSlicer(TimeSeriesSlicer):
    """
    달력 주기별 슬라이서.

    Args:
        series: 타임스탬프가 있는 시리즈 (오름차순)
        period: pandas period alias ("Y" 연, "Q" 분기, "M" 월, "W" 주, "D" 일).
            None이면 settings.yaml의 analysis.slicer.period 사용
    """

    def __init__(self, series: PriceSeries, period: str | None = None):
        if period is None:
            period = get_config().get("analysis", {}).get("slicer", {}).get("period", "Y")
        self.period = period
        super().__init__(series, self._period_windows(series, period))
        logger.debug(f"RegularSlicer: period={period}, {len(self)}개 구간")

    @staticmethod
    def _period_windows(series: PriceSeries, period: str) -> list[tuple[int, int]]:
        if series.is_empty:
            return []

        timestamps = series.timestamps
        if timestamps.hasnans:
            raise InvalidArgumentError("타임스탬프가 없는 틱이 있어 주기별로 나눌 수 없습니다")
        if not timestamps.is_monotonic_increasing:
            raise InvalidArgumentError("타임스탬프가 오름차순이 아닙니다")

        try:
            periods = timestamps.to_period(period)
        except ValueError as e:
            raise InvalidArgumentError(f"알 수 없는 주기: {period}") from e

        labels = np.asarray(periods.asi8)
        # 주기 라벨이 바뀌는 위치 = 새 구간 시작
        starts = np.flatnonzero(np.diff(labels)) + 1
        bounds = np.concatenate(([0], starts, [len(labels)]))
        offset = series.begin_index
        return [
            (offset + int(bounds[k]), offset + int(bounds[k + 1]) - 1)
            for k in range(len(bounds) - 1)
        ]


class CountSlicer(TimeSeriesSlicer):
    """시리즈를 count개의 균등 구간으로 나눔 (앞쪽 구간이 1틱 더 길 수 있음)"""

    def __init__(self, series: PriceSeries, count: int):
        if count < 1 or count > max(len(series), 1):
            raise InvalidArgumentError(
                f"구간 수 {count}는 1 이상 틱 수({len(series)}) 이하여야 합니다"
            )
        self.count = count
        super().__init__(series, self._count_windows(series, count))

    @staticmethod
    def _count_windows(series: PriceSeries, count: int) -> list[tuple[int, int]]:
        if series.is_empty:
            return []
        chunks = np.array_split(np.arange(series.begin_index, series.end_index + 1), count)
        return [(int(chunk[0]), int(chunk[-1])) for chunk in chunks]
