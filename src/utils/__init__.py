"""
StratEval — Utils 패키지

로깅 등 공통 유틸리티.

공개 API:
    - setup_logger: loguru 로거 설정
    - context_logger: 분석 컨텍스트를 바인딩한 로거
"""
from src.utils.logger import context_logger, setup_logger

__all__ = [
    "setup_logger",
    "context_logger",
]
