from __future__ import annotations

"""
StratEval — 주문 / 거래

Order: 특정 틱 인덱스에서의 매수(BUY) 또는 매도(SELL) 지시.
Trade: 진입 주문 1건 + 청산 주문 1건으로 이루어진 왕복 거래.
    상태: NEW(주문 없음) → OPENED(진입만) → CLOSED(진입+청산, 이후 불변)

방향과 인덱스 순서는 독립:
    - 롱/숏은 진입 주문 타입으로만 결정 (entry_is_buy)
    - span은 항상 (min(진입, 청산), max(진입, 청산))

Depends on:
    - src.core.series (평균 종가 조회)

Used by:
    - src.core.trading_record (거래 원장)
    - src.analysis.cash_flow, src.analysis.criteria (수익 비율 계산)
"""
from dataclasses import dataclass
from enum import Enum

from src.core.errors import IllegalStateError, InvalidArgumentError
from src.core.series import PriceSeries


class OrderType(Enum):
    """주문 방향"""
    BUY = "BUY"
    SELL = "SELL"

    def complement(self) -> OrderType:
        return OrderType.SELL if self is OrderType.BUY else OrderType.BUY


@dataclass(frozen=True)
class Order:
    """체결된 주문 (price/amount가 None이면 시리즈 종가 기준)"""
    index: int
    type: OrderType
    price: float | None = None
    amount: float | None = None

    def __post_init__(self):
        if self.index < 0:
            raise InvalidArgumentError(f"주문 인덱스는 0 이상이어야 합니다: {self.index}")

    @classmethod
    def buy_at(cls, index: int, price: float | None = None,
               amount: float | None = None) -> Order:
        return cls(index, OrderType.BUY, price, amount)

    @classmethod
    def sell_at(cls, index: int, price: float | None = None,
                amount: float | None = None) -> Order:
        return cls(index, OrderType.SELL, price, amount)

    @property
    def is_buy(self) -> bool:
        return self.type is OrderType.BUY

    @property
    def is_sell(self) -> bool:
        return self.type is OrderType.SELL

    def __str__(self) -> str:
        fill = f" @ {self.price}" if self.price is not None else ""
        return f"{self.type.value}[{self.index}]{fill}"


class Trade:
    """
    진입/청산 왕복 거래.

    사용법:
        trade = Trade(Order.buy_at(0), Order.sell_at(3))   # 즉시 CLOSED
        trade.return_ratio(series)                         # close[3] / close[0]

        short = Trade(OrderType.SELL)                      # NEW, 숏 진입 대기
        short.operate(2)                                   # SELL[2] → OPENED
        short.operate(5)                                   # BUY[5]  → CLOSED
    """

    def __init__(self, entry: Order | OrderType | None = None, exit: Order | None = None):
        self._entry: Order | None = None
        self._exit: Order | None = None

        if isinstance(entry, Order):
            if exit is None:
                raise InvalidArgumentError("진입 주문만으로 Trade를 만들 수 없습니다 (operate() 사용)")
            if entry.type is exit.type:
                raise InvalidArgumentError("진입/청산 주문의 타입이 같을 수 없습니다")
            self.starting_type = entry.type
            self._entry = entry
            self._exit = exit
        else:
            self.starting_type = entry or OrderType.BUY

    # ──────────────────────────────────────
    # 상태
    # ──────────────────────────────────────

    @property
    def entry(self) -> Order | None:
        return self._entry

    @property
    def exit(self) -> Order | None:
        return self._exit

    def is_new(self) -> bool:
        return self._entry is None and self._exit is None

    def is_opened(self) -> bool:
        return self._entry is not None and self._exit is None

    def is_closed(self) -> bool:
        return self._entry is not None and self._exit is not None

    def operate(self, index: int, price: float | None = None,
                amount: float | None = None) -> Order:
        """
        현재 상태에 맞는 주문 기록.

        NEW → starting_type 진입, OPENED → 반대 타입 청산, CLOSED → IllegalStateError
        """
        if self.is_new():
            self._entry = Order(index, self.starting_type, price, amount)
            return self._entry
        if self.is_opened():
            if index < self._entry.index:
                raise IllegalStateError(
                    f"청산 인덱스({index})가 진입 인덱스({self._entry.index})보다 앞섭니다"
                )
            self._exit = Order(index, self.starting_type.complement(), price, amount)
            return self._exit
        raise IllegalStateError("이미 청산된 거래에는 주문할 수 없습니다")

    # ──────────────────────────────────────
    # 방향 / 구간
    # ──────────────────────────────────────

    @property
    def entry_is_buy(self) -> bool:
        """롱 거래 여부 (진입 주문 타입 기준, 인덱스 순서와 무관)"""
        if self._entry is not None:
            return self._entry.is_buy
        return self.starting_type is OrderType.BUY

    @property
    def has_prices(self) -> bool:
        """진입/청산 모두 체결가가 지정되었는지"""
        return (self.is_closed()
                and self._entry.price is not None
                and self._exit.price is not None)

    @property
    def has_amounts(self) -> bool:
        return (self.is_closed()
                and self._entry.amount is not None
                and self._exit.amount is not None)

    @property
    def entry_indexes(self) -> list[int]:
        return [self._entry.index] if self._entry is not None else []

    @property
    def exit_indexes(self) -> list[int]:
        return [self._exit.index] if self._exit is not None else []

    @property
    def span(self) -> tuple[int, int]:
        """(시작, 끝) 인덱스 — 방향과 무관하게 오름차순"""
        self._require_closed()
        a, b = self._entry.index, self._exit.index
        return min(a, b), max(a, b)

    # ──────────────────────────────────────
    # 가치 / 수익 비율
    # ──────────────────────────────────────

    def _require_closed(self) -> None:
        if not self.is_closed():
            raise IllegalStateError("청산되지 않은 거래입니다")

    def entries_value(self, series: PriceSeries | None = None) -> float:
        """진입 가치: 체결가 지정 시 체결가, 아니면 진입 인덱스 평균 종가"""
        self._require_closed()
        if self.has_prices:
            return float(self._entry.price)
        if series is None:
            raise InvalidArgumentError("체결가가 없는 거래는 시리즈가 필요합니다")
        return series.average_close_price(self.entry_indexes)

    def exits_value(self, series: PriceSeries | None = None) -> float:
        """청산 가치: 체결가 지정 시 체결가, 아니면 청산 인덱스 평균 종가"""
        self._require_closed()
        if self.has_prices:
            return float(self._exit.price)
        if series is None:
            raise InvalidArgumentError("체결가가 없는 거래는 시리즈가 필요합니다")
        return series.average_close_price(self.exit_indexes)

    def return_ratio(self, series: PriceSeries | None = None) -> float:
        """
        거래 수익 비율 (1.0 = 본전).

        롱: 청산/진입, 숏: 진입/청산. 청산 전 거래는 1.0.
        """
        if not self.is_closed():
            return 1.0
        entries = self.entries_value(series)
        exits = self.exits_value(series)
        if self.entry_is_buy:
            return exits / entries
        return entries / exits

    # ──────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trade):
            return NotImplemented
        return self._entry == other._entry and self._exit == other._exit

    def __repr__(self) -> str:
        return f"Trade(entry={self._entry}, exit={self._exit})"
