from __future__ import annotations

"""
StratEval — 전략 선택

여러 후보 전략의 거래 원장을 하나의 평가 기준으로 비교하여 최선을 고릅니다.
동점이면 먼저 나온 후보가 선택됩니다.

Depends on:
    - src.analysis.criteria (평가 기준)
    - src.utils.logger (평가 기준 이름을 컨텍스트로 바인딩)

Used by:
    - 외부 전략 비교/리포트 모듈
"""
from typing import Any, Iterable, Mapping, TypeVar

from src.analysis.criteria import AnalysisCriterion
from src.core.errors import InvalidArgumentError
from src.core.series import PriceSeries
from src.core.trading_record import TradingRecord
from src.utils.logger import context_logger

S = TypeVar("S")


def choose_best(criterion: AnalysisCriterion, series: PriceSeries,
                candidates: Mapping[Any, TradingRecord] | Iterable[tuple[S, TradingRecord]]) -> S:
    """
    최선의 후보 전략 반환.

    Args:
        criterion: 비교에 사용할 평가 기준
        series: 백테스트 시리즈
        candidates: {전략: 원장} 또는 (전략, 원장) 쌍의 목록

    Returns:
        다른 어떤 후보에게도 better_than으로 지지 않는 첫 번째 전략
    """
    pairs = candidates.items() if isinstance(candidates, Mapping) else candidates
    log = context_logger(str(criterion))

    best_strategy = None
    best_value = None
    seen = 0
    for strategy, record in pairs:
        value = criterion.calculate(series, record)
        log.debug(f"{_label(strategy)} = {value:.4f}")
        if best_value is None or criterion.better_than(value, best_value):
            best_strategy, best_value = strategy, value
        seen += 1

    if seen == 0:
        raise InvalidArgumentError("비교할 후보 전략이 없습니다")

    log.info(f"최선 전략: {_label(best_strategy)} = {best_value:.4f} (후보 {seen}개)")
    return best_strategy


def _label(strategy: Any) -> str:
    return str(getattr(strategy, "name", None) or strategy)
