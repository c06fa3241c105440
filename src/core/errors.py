"""
StratEval — 예외 정의

모두 프로그래머 오류 성격이며 호출자에게 즉시 전파됩니다 (재시도/복구 없음).
내장 예외를 함께 상속하므로 `except IndexError` 같은 일반 처리도 동작합니다.
"""


class StratEvalError(Exception):
    """StratEval 예외 베이스"""


class IndexOutOfRangeError(StratEvalError, IndexError):
    """틱/거래 인덱스가 시리즈 범위를 벗어남"""


class IllegalStateError(StratEvalError, RuntimeError):
    """포지션 상태와 맞지 않는 주문 (보유 중 진입, 미보유 청산 등)"""


class InvalidArgumentError(StratEvalError, ValueError):
    """잘못된 인자 (빈 인덱스 집합, 겹치거나 빈틈 있는 슬라이스 구간 등)"""
