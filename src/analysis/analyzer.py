from __future__ import annotations

"""
StratEval — 평가 기준 분석기

여러 평가 기준을 한 번에 계산하여 dict / DataFrame으로 반환합니다.
출력(콘솔/차트/파일)은 하지 않으며, 리포트 모듈이 결과를 받아 사용합니다.

사용법:
    analyzer = CriteriaAnalyzer(series)               # settings.yaml 기본 기준
    analyzer.summary(record)                          # {"Maximum Drawdown": 0.12, ...}
    analyzer.slice_table(slicer.decisions(records))   # 구간별 + total 행

Depends on:
    - src.analysis.criteria (평가 기준, resolve_criterion)
    - src.analysis.slicer (Decision)
    - src.core.config (analysis.criteria, analysis.transaction_cost)
    - src.utils.logger (시리즈 이름을 컨텍스트로 바인딩)
    - pandas (구간별 결과 테이블)

Modification Guide:
    - 기본 기준 변경: settings.yaml의 analysis.criteria 수정
    - 테이블 컬럼 추가: slice_table()의 row dict에 키 추가
"""
from typing import Sequence

import pandas as pd

from src.analysis.criteria import AnalysisCriterion, Trades, resolve_criterion
from src.analysis.slicer import Decision
from src.core.config import get_config
from src.core.errors import StratEvalError
from src.core.series import PriceSeries
from src.utils.logger import context_logger


class CriteriaAnalyzer:
    """시리즈 1개에 대해 여러 평가 기준을 계산"""

    def __init__(self, series: PriceSeries,
                 criteria: Sequence[AnalysisCriterion] | None = None):
        self.series = series
        self._log = context_logger(series.name or "series")
        self.criteria: list[AnalysisCriterion] = (
            list(criteria) if criteria is not None else self.default_criteria()
        )

    @staticmethod
    def default_criteria() -> list[AnalysisCriterion]:
        """settings.yaml analysis.criteria 순서대로 기준 생성"""
        analysis_config = get_config().get("analysis", {})
        cost_config = analysis_config.get("transaction_cost", {})

        criteria = []
        for key in analysis_config.get("criteria", []):
            # 거래 비용 기준만 생성자 파라미터가 필요
            kwargs = dict(cost_config) if key == "linear_transaction_cost" else {}
            criteria.append(resolve_criterion(key, **kwargs))
        return criteria

    def summary(self, trades: Trades) -> dict[str, float]:
        """거래(원장/목록/단건)에 대한 기준별 값"""
        try:
            result = {c.name: c.calculate(self.series, trades) for c in self.criteria}
        except StratEvalError as e:
            self._log.error(f"평가 기준 계산 실패: {e}")
            raise
        self._log.info(f"평가 완료: {len(self.criteria)}개 기준")
        return result

    def summarize(self, decisions: Sequence[Decision]) -> dict[str, float]:
        """구간별 Decision을 이어 붙여 전체 시리즈 기준으로 집계"""
        try:
            return {c.name: c.summarize(self.series, decisions) for c in self.criteria}
        except StratEvalError as e:
            self._log.error(f"구간 집계 실패 ({len(decisions)}개 구간): {e}")
            raise

    def slice_table(self, decisions: Sequence[Decision]) -> pd.DataFrame:
        """
        구간별 평가 테이블.

        Returns:
            index = 구간 번호 (+ 마지막 "total" 행),
            columns = begin, end, start, trades, <기준 이름>...
        """
        rows = []
        for pos, decision in enumerate(decisions):
            view = decision.series
            row = {
                "slice": decision.index if decision.index is not None else pos,
                "begin": view.begin_index,
                "end": view.end_index,
                "start": view.timestamps[0] if len(view) else pd.NaT,
                "trades": len(decision.trades),
            }
            try:
                for criterion in self.criteria:
                    row[criterion.name] = criterion.calculate(view, decision.trades)
            except StratEvalError as e:
                self._log.error(f"구간 {row['slice']} [{view.begin_index}, {view.end_index}] 평가 실패: {e}")
                raise
            rows.append(row)

        total = {
            "slice": "total",
            "begin": self.series.begin_index,
            "end": self.series.end_index,
            "start": self.series.timestamps[0] if len(self.series) else pd.NaT,
            "trades": sum(len(d.trades) for d in decisions),
        }
        total.update(self.summarize(decisions))
        rows.append(total)

        return pd.DataFrame(rows).set_index("slice")
