from __future__ import annotations

"""
StratEval — 거래 원장 (TradingRecord)

청산된 거래의 순서 있는 목록 + 진행 중인 거래 1건.
외부 룰 엔진은 enter()/exit()만 호출합니다.

불변 조건:
    - 연속된 두 거래에서 뒤 거래의 진입 인덱스 >= 앞 거래의 청산 인덱스
    - 진행 중 거래는 항상 1건 (NEW 또는 OPENED)

동시성:
    - enter/exit는 단일 소유자만 호출 (스레드 안전하지 않음)
    - 청산이 끝난 원장을 읽는 CashFlow/평가 기준은 동시 실행 가능

Depends on:
    - src.core.trade (Order, Trade, OrderType)

Used by:
    - src.analysis.* (CashFlow, 평가 기준, 전략 선택)
"""
from typing import Iterable

from loguru import logger

from src.core.errors import IllegalStateError
from src.core.trade import Order, OrderType, Trade


class TradingRecord:
    """
    전략 1개의 거래 원장.

    사용법:
        record = TradingRecord()
        record.enter(0)          # BUY[0]
        record.exit(3)           # SELL[3] → Trade 1건 기록
        record.trade_count       # 1
    """

    def __init__(self, starting_type: OrderType = OrderType.BUY):
        self.starting_type = starting_type
        self.current_trade = Trade(starting_type)

        self._trades: list[Trade] = []
        self._orders: list[Order] = []
        self._entries: list[Order] = []
        self._exits: list[Order] = []

    @classmethod
    def from_orders(cls, *orders: Order) -> TradingRecord:
        """
        진입/청산이 번갈아 나오는 주문 목록으로 원장 재구성.

        새 거래의 첫 주문 타입이 starting_type과 다르면 방향을 뒤집은 거래로 기록
        (예: BUY, SELL, SELL, BUY → 롱 1건 + 숏 1건).
        """
        if not orders:
            return cls()

        record = cls(orders[0].type)
        for order in orders:
            if record.current_trade.is_new():
                if order.type is not record.starting_type:
                    record.current_trade = Trade(order.type)
                record.enter(order.index, order.price, order.amount)
            else:
                record.exit(order.index, order.price, order.amount)
        return record

    # ──────────────────────────────────────
    # 주문 (룰 엔진 계약)
    # ──────────────────────────────────────

    def enter(self, index: int, price: float | None = None,
              amount: float | None = None) -> Order:
        """포지션 진입 — 이미 보유 중이면 IllegalStateError"""
        if not self.current_trade.is_new():
            raise IllegalStateError(f"이미 진행 중인 거래가 있습니다: {self.current_trade}")
        last_exit = self.last_exit
        if last_exit is not None and index < last_exit.index:
            raise IllegalStateError(
                f"진입 인덱스({index})가 직전 청산 인덱스({last_exit.index})보다 앞섭니다"
            )

        order = self.current_trade.operate(index, price, amount)
        self._entries.append(order)
        self._orders.append(order)
        return order

    def exit(self, index: int, price: float | None = None,
             amount: float | None = None) -> Order:
        """포지션 청산 — 보유 중이 아니면 IllegalStateError"""
        if not self.current_trade.is_opened():
            raise IllegalStateError("청산할 진행 중 거래가 없습니다")

        order = self.current_trade.operate(index, price, amount)
        self._exits.append(order)
        self._orders.append(order)

        # 청산 완료 → 원장에 기록 후 새 거래 준비
        self._trades.append(self.current_trade)
        logger.debug(f"거래 기록: {self.current_trade}")
        self.current_trade = Trade(self.starting_type)
        return order

    # ──────────────────────────────────────
    # 조회
    # ──────────────────────────────────────

    @property
    def trades(self) -> list[Trade]:
        """청산된 거래 목록 (진입 순서)"""
        return list(self._trades)

    @property
    def trade_count(self) -> int:
        return len(self._trades)

    @property
    def is_closed(self) -> bool:
        """진행 중(OPENED) 거래가 없는지"""
        return not self.current_trade.is_opened()

    @property
    def last_trade(self) -> Trade | None:
        return self._trades[-1] if self._trades else None

    def last_order(self, order_type: OrderType | None = None) -> Order | None:
        """마지막 주문 (order_type 지정 시 해당 타입 중 마지막)"""
        if order_type is None:
            return self._orders[-1] if self._orders else None
        for order in reversed(self._orders):
            if order.type is order_type:
                return order
        return None

    @property
    def last_entry(self) -> Order | None:
        return self._entries[-1] if self._entries else None

    @property
    def last_exit(self) -> Order | None:
        return self._exits[-1] if self._exits else None

    def __len__(self) -> int:
        return len(self._trades)

    def __repr__(self) -> str:
        state = "open" if self.current_trade.is_opened() else "flat"
        return f"TradingRecord(trades={len(self._trades)}, {state})"


def trades_of(target: Trade | TradingRecord | Iterable[Trade]) -> list[Trade]:
    """
    평가 대상 → 거래 목록.

    Trade 단건은 [trade], TradingRecord는 청산된 거래, 그 외는 순서대로 리스트화.
    """
    if isinstance(target, Trade):
        return [target]
    if isinstance(target, TradingRecord):
        return target.trades
    return list(target)
