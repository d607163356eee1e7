"""
KPI/KRI calculation dispatch.

Each calculation kind reads what it needs from ``MetricAggregates`` and
applies a pure formula from ``formulas``. Dispatch is a closed table; an
unknown tag is rejected when the formula is parsed.
"""

import logging
from dataclasses import dataclass

from hrms.models.shared.enums import KPICalculationType, KRICalculationType, RiskLevel
from hrms.services.performance import formulas
from hrms.services.performance.aggregates import MetricAggregates
from hrms.services.performance.risk import classify_risk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KRIResult:
    value: float
    risk_level: RiskLevel


async def _task_completion_rate(agg: MetricAggregates) -> float:
    completed, total = await agg.task_counts()
    return formulas.completion_rate(completed, total)


async def _ontime_delivery(agg: MetricAggregates) -> float:
    on_time, total = await agg.ontime_counts()
    return formulas.ontime_rate(on_time, total)


async def _avg_task_rating(agg: MetricAggregates) -> float:
    return formulas.average_rating(await agg.average_rating())


async def _tasks_completed(agg: MetricAggregates) -> float:
    return float(await agg.tasks_completed())


async def _attendance_rate(agg: MetricAggregates) -> float:
    present, total = await agg.attendance_counts()
    return formulas.attendance_rate(present, total)


async def _overdue_tasks(agg: MetricAggregates) -> float:
    return float(await agg.overdue_tasks())


async def _tasks_at_risk(agg: MetricAggregates) -> float:
    return float(await agg.tasks_at_risk())


async def _low_performance(agg: MetricAggregates) -> float:
    return formulas.inverse_rate(await _task_completion_rate(agg))


async def _high_absenteeism(agg: MetricAggregates) -> float:
    return formulas.inverse_rate(await _attendance_rate(agg))


KPI_CALCULATORS = {
    KPICalculationType.TASK_COMPLETION_RATE: _task_completion_rate,
    KPICalculationType.ONTIME_DELIVERY: _ontime_delivery,
    KPICalculationType.AVG_TASK_RATING: _avg_task_rating,
    KPICalculationType.TASKS_COMPLETED: _tasks_completed,
    KPICalculationType.ATTENDANCE_RATE: _attendance_rate,
}

KRI_CALCULATORS = {
    KRICalculationType.OVERDUE_TASKS: _overdue_tasks,
    KRICalculationType.TASKS_AT_RISK: _tasks_at_risk,
    KRICalculationType.LOW_PERFORMANCE: _low_performance,
    KRICalculationType.HIGH_ABSENTEEISM: _high_absenteeism,
}


async def calculate_kpi(definition, aggregates: MetricAggregates) -> float:
    """Value of a KPI definition over the scope and period bound to aggregates"""
    formula = formulas.parse_kpi_formula(definition.calculation_formula)
    value = await KPI_CALCULATORS[formula.type](aggregates)
    logger.debug(f"KPI {definition.code} for {aggregates.scope.label} = {value}")
    return value


async def calculate_kri(definition, aggregates: MetricAggregates) -> KRIResult:
    """Value and risk level of a KRI definition"""
    formula = formulas.parse_kri_formula(definition.calculation_formula)
    value = await KRI_CALCULATORS[formula.type](aggregates)
    risk_level = classify_risk(value, definition.threshold_warning, definition.threshold_critical)
    logger.debug(f"KRI {definition.code} for {aggregates.scope.label} = {value} ({risk_level.value})")
    return KRIResult(value=value, risk_level=risk_level)
