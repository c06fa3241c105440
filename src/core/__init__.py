"""
StratEval — Core 패키지

평가 대상 데이터 모델: 가격 시리즈, 주문/거래, 거래 원장, 예외, 설정 로더.

공개 API:
    - Tick / PriceSeries / ConstrainedSeries: 가격 시리즈와 제한 뷰
    - Order / OrderType / Trade: 주문과 왕복 거래
    - TradingRecord: 거래 원장 (룰 엔진의 enter/exit 대상)
    - IndexOutOfRangeError / IllegalStateError / InvalidArgumentError: 예외
    - get_config: settings.yaml 로더
"""
from src.core.config import get_config, load_config, reload_config
from src.core.errors import (
    IllegalStateError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    StratEvalError,
)
from src.core.series import ConstrainedSeries, PriceSeries, Tick
from src.core.trade import Order, OrderType, Trade
from src.core.trading_record import TradingRecord, trades_of

__all__ = [
    "get_config",
    "load_config",
    "reload_config",
    "StratEvalError",
    "IndexOutOfRangeError",
    "IllegalStateError",
    "InvalidArgumentError",
    "Tick",
    "PriceSeries",
    "ConstrainedSeries",
    "Order",
    "OrderType",
    "Trade",
    "TradingRecord",
    "trades_of",
]
