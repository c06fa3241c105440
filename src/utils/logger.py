"""
StratEval — 로깅 설정

loguru 기반 로거를 콘솔(컬러) + 파일(로테이션)로 출력합니다.
모든 레코드에 분석 컨텍스트(extra["context"]: 시리즈 이름 / 평가 기준 등)가 붙으며,
바인딩하지 않은 로그는 "-"로 표시됩니다.

Depends on:
    - src.core.config (로깅 레벨, 로테이션 설정)
    - loguru (로깅 프레임워크)

Used by:
    - 분석을 실행하는 호출 측에서 setup_logger() 1회 호출
    - src.analysis.analyzer / src.analysis.selection (context_logger로 컨텍스트 바인딩)

Modification Guide:
    - 로그 포맷 변경: CONSOLE_FORMAT / FILE_FORMAT 수정
    - 파일 출력 끄기: setup_logger(log_to_file=False)
    - 레벨 임시 변경: setup_logger(level="DEBUG") (settings.yaml보다 우선)
"""
import sys

from loguru import logger

from src.core.config import get_config, LOGS_DIR

DEFAULT_CONTEXT = "-"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>[{extra[context]}]</magenta> <cyan>{name}</cyan>:<cyan>{function}</cyan> "
    "| <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | [{extra[context]}] "
    "{name}:{function}:{line} | {message}"
)


def context_logger(context: str):
    """분석 컨텍스트(시리즈 이름, 평가 기준 등)를 바인딩한 로거"""
    return logger.bind(context=context or DEFAULT_CONTEXT)


def setup_logger(log_to_file: bool = True, level: str | None = None) -> None:
    """loguru 로거 설정"""
    log_config = get_config().get("logging", {})

    level = level or log_config.get("level", "INFO")
    rotation = log_config.get("rotation", "10 MB")
    retention = log_config.get("retention", "30 days")

    # 기존 핸들러 제거 후 컨텍스트 기본값 지정
    logger.remove()
    logger.configure(extra={"context": DEFAULT_CONTEXT})

    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_to_file:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(LOGS_DIR / "strateval.log"),
            level=level,
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
        )

    logger.info(f"로깅 시스템 초기화 완료 (level={level}, file={log_to_file})")
