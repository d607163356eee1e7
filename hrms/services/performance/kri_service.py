import logging
from typing import Any, Dict, Optional

from hrms.models.performance.kri import KRIDefinition, KRIMetric
from hrms.services.performance.aggregates import MetricAggregates
from hrms.services.performance.calculator import calculate_kri
from hrms.services.performance.formulas import parse_kri_formula, round2
from hrms.services.performance.metric_service import MetricService

logger = logging.getLogger(__name__)

def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None

class KRIService(MetricService):
    kind = "KRI"
    definition_model = KRIDefinition
    metric_model = KRIMetric
    definition_fk = "kri_id"

    def parse_formula(self, raw):
        return parse_kri_formula(raw)

    async def evaluate(self, definition, aggregates: MetricAggregates) -> Dict[str, Any]:
        result = await calculate_kri(definition, aggregates)
        return {
            "calculated_value": round2(result.value),
            "risk_level": result.risk_level,
        }

    def extra_filters(self, query) -> list:
        risk_level = getattr(query, "risk_level", None)
        if risk_level is None:
            return []
        return [KRIMetric.risk_level == risk_level]

    def result_item(self, definition, row) -> Dict[str, Any]:
        return {
            "kri_id": definition.id,
            "kri_code": definition.code,
            "kri_name": definition.name,
            "calculated_value": float(row.calculated_value),
            "risk_level": row.risk_level,
            "threshold_warning": _as_float(definition.threshold_warning),
            "threshold_critical": _as_float(definition.threshold_critical),
        }

    def metric_item(self, row, definition, user_name: Optional[str]) -> Dict[str, Any]:
        return {
            "id": row.id,
            "kri_id": row.kri_id,
            "kri_code": definition.code,
            "kri_name": definition.name,
            "user_id": row.user_id,
            "user_name": user_name,
            "department": row.department,
            "period_type": row.period_type,
            "period_start": row.period_start,
            "period_end": row.period_end,
            "calculated_value": float(row.calculated_value),
            "risk_level": row.risk_level,
            "threshold_warning": _as_float(definition.threshold_warning),
            "threshold_critical": _as_float(definition.threshold_critical),
            "calculated_at": row.calculated_at,
        }
