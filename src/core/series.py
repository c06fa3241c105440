from __future__ import annotations

"""
StratEval — 가격 시리즈

틱(OHLCV) 시퀀스를 인덱스로 조회하는 읽기 전용 시리즈와,
같은 저장소를 공유하면서 인덱스 구간만 좁혀 보여주는 제한 뷰(ConstrainedSeries).

인덱스 규칙:
    - 거래/주문은 항상 원본 시리즈의 절대 인덱스를 사용
    - 뷰는 [begin_index, end_index] 밖의 인덱스를 거부 (IndexOutOfRangeError)
    - to_local() / to_absolute()로 뷰 내부 0-기반 인덱스와 상호 변환

Depends on:
    - numpy (종가 배열)
    - pandas (타임스탬프, DataFrame 변환)

Used by:
    - src.core.trade (진입/청산 평균 종가)
    - src.analysis.cash_flow, src.analysis.criteria (종가 조회)
    - src.analysis.slicer (구간별 제한 뷰 생성)

Modification Guide:
    - 새 틱 필드 추가: Tick에 기본값 있는 필드 추가 + from_frame() 매핑 추가
    - 뷰는 데이터를 복사하지 않음: _ticks/_closes는 원본과 공유
"""
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from src.core.errors import IndexOutOfRangeError, InvalidArgumentError


@dataclass(frozen=True)
class Tick:
    """단일 시점의 시세 (수집 이후 불변)"""
    close: float
    timestamp: pd.Timestamp | None = None
    open: float | None = None
    high: float | None = None
    low: float | None = None
    volume: float | None = None


class PriceSeries:
    """
    인덱스 기반 가격 시리즈.

    사용법:
        series = PriceSeries.from_closes([100, 105, 95, 110])
        series.close_price(2)                   # 95.0
        series.average_close_price([0, 1])      # 102.5
        view = series.constrain(1, 3)           # 인덱스 1~3만 노출
    """

    def __init__(self, ticks: Iterable[Tick], name: str = ""):
        self._ticks: tuple[Tick, ...] = tuple(ticks)
        closes = np.array([t.close for t in self._ticks], dtype=float)
        closes.setflags(write=False)
        self._closes = closes
        self._timestamps = pd.DatetimeIndex([t.timestamp for t in self._ticks])
        self.name = name
        self._begin = 0
        self._end = len(self._ticks) - 1

    # ──────────────────────────────────────
    # 생성 헬퍼
    # ──────────────────────────────────────

    @classmethod
    def from_closes(cls, closes: Sequence[float], start: str = "2000-01-01",
                    freq: str = "D", name: str = "") -> PriceSeries:
        """종가 목록으로 시리즈 생성 (타임스탬프는 start부터 freq 간격)"""
        timestamps = pd.date_range(start=start, periods=len(closes), freq=freq)
        ticks = [Tick(close=float(c), timestamp=ts) for c, ts in zip(closes, timestamps)]
        return cls(ticks, name=name)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, name: str = "") -> PriceSeries:
        """
        OHLCV DataFrame으로 시리즈 생성.

        Args:
            df: close 컬럼 필수. DatetimeIndex 또는 date 컬럼을 타임스탬프로 사용.
                컬럼명은 대소문자 무관 (Close, close 모두 허용).
        """
        frame = df.rename(columns=str.lower)
        if "close" not in frame.columns:
            raise InvalidArgumentError("DataFrame에 close 컬럼이 없습니다")

        if "date" in frame.columns:
            timestamps = pd.to_datetime(frame["date"])
        elif isinstance(frame.index, pd.DatetimeIndex):
            timestamps = frame.index
        else:
            timestamps = [None] * len(frame)

        def _col(name: str) -> list:
            if name in frame.columns:
                return [float(v) for v in frame[name]]
            return [None] * len(frame)

        opens, highs, lows, volumes = _col("open"), _col("high"), _col("low"), _col("volume")
        ticks = [
            Tick(close=float(close), timestamp=ts, open=o, high=h, low=lo, volume=v)
            for close, ts, o, h, lo, v in zip(frame["close"], timestamps, opens, highs, lows, volumes)
        ]
        return cls(ticks, name=name)

    # ──────────────────────────────────────
    # 범위
    # ──────────────────────────────────────

    @property
    def begin_index(self) -> int:
        return self._begin

    @property
    def end_index(self) -> int:
        return self._end

    @property
    def tick_count(self) -> int:
        return self._end - self._begin + 1

    @property
    def is_empty(self) -> bool:
        return self.tick_count <= 0

    def __len__(self) -> int:
        return max(self.tick_count, 0)

    def contains(self, index: int) -> bool:
        return self._begin <= index <= self._end

    def _check_index(self, index: int) -> None:
        if not self.contains(index):
            raise IndexOutOfRangeError(
                f"인덱스 {index}가 시리즈 범위 [{self._begin}, {self._end}]를 벗어남"
            )

    def to_local(self, index: int) -> int:
        """절대 인덱스 → 시리즈 내부 0-기반 인덱스"""
        self._check_index(index)
        return index - self._begin

    def to_absolute(self, offset: int) -> int:
        """시리즈 내부 0-기반 인덱스 → 절대 인덱스"""
        if not 0 <= offset < len(self):
            raise IndexOutOfRangeError(
                f"로컬 인덱스 {offset}가 범위 [0, {len(self) - 1}]를 벗어남"
            )
        return self._begin + offset

    # ──────────────────────────────────────
    # 조회
    # ──────────────────────────────────────

    def tick(self, index: int) -> Tick:
        self._check_index(index)
        return self._ticks[index]

    def close_price(self, index: int) -> float:
        self._check_index(index)
        return float(self._closes[index])

    def average_close_price(self, indices: Sequence[int]) -> float:
        """주어진 인덱스 집합의 평균 종가"""
        indices = list(indices)
        if not indices:
            raise InvalidArgumentError("평균 종가를 계산할 인덱스가 비어 있습니다")
        for index in indices:
            self._check_index(index)
        return float(self._closes[indices].mean())

    @property
    def closes(self) -> np.ndarray:
        """접근 가능 구간의 종가 (읽기 전용, 복사 없음)"""
        return self._closes[self._begin:self._end + 1]

    @property
    def timestamps(self) -> pd.DatetimeIndex:
        return self._timestamps[self._begin:self._end + 1]

    def constrain(self, begin: int, end: int) -> ConstrainedSeries:
        """[begin, end] 구간만 노출하는 뷰 생성 (좁히기만 가능)"""
        return ConstrainedSeries(self, begin, end)

    def to_frame(self) -> pd.DataFrame:
        """접근 가능 구간을 DataFrame으로 변환 (index = 절대 인덱스)"""
        ticks = self._ticks[self._begin:self._end + 1]
        return pd.DataFrame(
            {
                "timestamp": self.timestamps,
                "open": [t.open for t in ticks],
                "high": [t.high for t in ticks],
                "low": [t.low for t in ticks],
                "close": self.closes,
                "volume": [t.volume for t in ticks],
            },
            index=pd.RangeIndex(self._begin, self._end + 1, name="index"),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, begin={self._begin}, end={self._end})"


class ConstrainedSeries(PriceSeries):
    """
    원본 시리즈의 [begin, end] 구간만 노출하는 뷰.

    틱 저장소와 종가 배열을 원본과 공유하며 복사하지 않습니다.
    원본 범위보다 넓게 만들 수 없습니다.
    """

    def __init__(self, underlying: PriceSeries, begin: int, end: int):
        if begin > end:
            raise InvalidArgumentError(f"begin({begin}) > end({end})")
        if begin < underlying.begin_index or end > underlying.end_index:
            raise InvalidArgumentError(
                f"구간 [{begin}, {end}]이 원본 범위 "
                f"[{underlying.begin_index}, {underlying.end_index}]를 벗어남"
            )

        self._ticks = underlying._ticks
        self._closes = underlying._closes
        self._timestamps = underlying._timestamps
        self.name = underlying.name
        self._begin = begin
        self._end = end
        self.underlying = underlying
