"""
StratEval — Analysis 패키지

거래 원장을 가격 시리즈에 재생하여 에퀴티 곡선과 평가 지표를 계산하고,
구간별로 나눈 결과를 집계/비교합니다.

공개 API:
    - CashFlow: 틱별 자산 배수 곡선
    - AnalysisCriterion: 평가 기준 인터페이스 (+ 기준별 구현 클래스)
    - TimeSeriesSlicer / RegularSlicer / CountSlicer: 구간 분할
    - Decision: 구간 1개 + 그 구간의 거래
    - choose_best: 평가 기준으로 최선 전략 선택
    - CriteriaAnalyzer: 여러 기준 일괄 계산
"""
from src.analysis.cash_flow import CashFlow
from src.analysis.slicer import (
    CountSlicer,
    Decision,
    RegularSlicer,
    TimeSeriesSlicer,
    decision_trades,
)
from src.analysis.criteria import (
    CRITERION_REGISTRY,
    AnalysisCriterion,
    AverageProfitableTradesCriterion,
    BuyAndHoldCriterion,
    LinearTransactionCostCriterion,
    MaximumDrawDownCriterion,
    NumberOfTradesCriterion,
    RewardRiskRatioCriterion,
    TotalProfitCriterion,
    resolve_criterion,
)
from src.analysis.selection import choose_best
from src.analysis.analyzer import CriteriaAnalyzer

__all__ = [
    "CashFlow",
    "TimeSeriesSlicer",
    "RegularSlicer",
    "CountSlicer",
    "Decision",
    "decision_trades",
    "AnalysisCriterion",
    "NumberOfTradesCriterion",
    "AverageProfitableTradesCriterion",
    "MaximumDrawDownCriterion",
    "RewardRiskRatioCriterion",
    "TotalProfitCriterion",
    "LinearTransactionCostCriterion",
    "BuyAndHoldCriterion",
    "CRITERION_REGISTRY",
    "resolve_criterion",
    "choose_best",
    "CriteriaAnalyzer",
]
