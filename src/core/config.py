from __future__ import annotations

"""
StratEval — 설정 로더

settings.yaml로부터 분석 설정(기본 평가 기준, 거래 비용, 슬라이서 주기)과
로깅 설정을 로드합니다. get_config()는 최초 1회 로드 후 캐시를 반환합니다.

Depends on:
    - pyyaml (YAML 파싱)

Used by:
    - src.utils.logger (로깅 레벨, 로테이션 설정)
    - src.analysis.analyzer (기본 평가 기준 목록, 거래 비용 파라미터)

Modification Guide:
    - 새 설정 섹션 추가: settings.yaml에 키 추가 + DEFAULT_CONFIG에 기본값 추가
    - 경로 상수 추가: ROOT_DIR 기반으로 Path 상수 정의
"""
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from loguru import logger


# 프로젝트 루트 디렉토리
ROOT_DIR = Path(__file__).parent.parent.parent
CONFIG_DIR = ROOT_DIR / "config"
LOGS_DIR = ROOT_DIR / "logs"

# settings.yaml이 없거나 키가 빠졌을 때 사용하는 기본값
DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "rotation": "10 MB",
        "retention": "30 days",
    },
    "analysis": {
        "criteria": [
            "number_of_trades",
            "average_profitable_trades",
            "maximum_drawdown",
            "reward_risk_ratio",
            "total_profit",
        ],
        "transaction_cost": {
            "initial_amount": 1000.0,
            "a": 0.005,
            "b": 0.0,
        },
        "slicer": {
            "period": "Y",
        },
    },
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """중첩 dict 병합 (override 우선)"""
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """settings.yaml 로드 후 기본값과 병합"""
    if config_path is None:
        config_path = CONFIG_DIR / "settings.yaml"

    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning(f"설정 파일이 없습니다: {config_path} — 기본값 사용")
        return deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return _merge(DEFAULT_CONFIG, config)


# 캐시된 설정 인스턴스
_config: dict[str, Any] | None = None


def get_config() -> dict[str, Any]:
    """캐시된 설정 반환 (최초 호출 시 로드)"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """설정 캐시를 무효화하고 settings.yaml을 다시 읽음"""
    global _config
    _config = load_config(config_path)
    return _config
