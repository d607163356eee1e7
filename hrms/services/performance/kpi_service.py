import logging
from typing import Any, Dict, Optional

from hrms.models.performance.kpi import KPIDefinition, KPIMetric
from hrms.services.performance.aggregates import MetricAggregates
from hrms.services.performance.calculator import calculate_kpi
from hrms.services.performance.formulas import parse_kpi_formula, round2
from hrms.services.performance.metric_service import MetricService
from hrms.services.performance.risk import kpi_status

logger = logging.getLogger(__name__)

def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None

class KPIService(MetricService):
    kind = "KPI"
    definition_model = KPIDefinition
    metric_model = KPIMetric
    definition_fk = "kpi_id"

    def parse_formula(self, raw):
        return parse_kpi_formula(raw)

    async def evaluate(self, definition, aggregates: MetricAggregates) -> Dict[str, Any]:
        value = round2(await calculate_kpi(definition, aggregates))
        return {
            "calculated_value": value,
            "target_value": definition.target_value,
            "status": kpi_status(value, definition.target_value),
        }

    def result_item(self, definition, row) -> Dict[str, Any]:
        return {
            "kpi_id": definition.id,
            "kpi_code": definition.code,
            "kpi_name": definition.name,
            "calculated_value": float(row.calculated_value),
            "target_value": _as_float(row.target_value),
            "status": row.status,
        }

    def metric_item(self, row, definition, user_name: Optional[str]) -> Dict[str, Any]:
        return {
            "id": row.id,
            "kpi_id": row.kpi_id,
            "kpi_code": definition.code,
            "kpi_name": definition.name,
            "user_id": row.user_id,
            "user_name": user_name,
            "department": row.department,
            "period_type": row.period_type,
            "period_start": row.period_start,
            "period_end": row.period_end,
            "calculated_value": float(row.calculated_value),
            "target_value": _as_float(row.target_value),
            "status": row.status,
            "calculated_at": row.calculated_at,
        }
