from decimal import Decimal
from typing import Optional, Union
from hrms.core.config import settings
from hrms.models.shared.enums import KPIStatus, RiskLevel

Number = Union[int, float, Decimal]


def _exact(value: Number) -> Decimal:
    return Decimal(str(value))


def classify_risk(
    value: Number,
    threshold_warning: Optional[Number],
    threshold_critical: Optional[Number],
) -> RiskLevel:
    """
    Map a KRI value to a risk level. First match wins:
    critical >= critical threshold, high >= warning, medium >= 70% of warning.
    """
    value = _exact(value)
    if threshold_critical is not None and value >= _exact(threshold_critical):
        return RiskLevel.CRITICAL
    if threshold_warning is not None:
        warning = _exact(threshold_warning)
        if value >= warning:
            return RiskLevel.HIGH
        if value >= warning * _exact(settings.KRI_MEDIUM_RATIO):
            return RiskLevel.MEDIUM
    return RiskLevel.LOW


def kpi_status(value: Number, target: Optional[Number]) -> KPIStatus:
    """Compare a KPI value with its target using a fixed +/-10% band"""
    if target is None:
        return KPIStatus.ON_TARGET
    value = _exact(value)
    target = _exact(target)
    if value < target * _exact(settings.KPI_BELOW_TARGET_FACTOR):
        return KPIStatus.BELOW_TARGET
    if value > target * _exact(settings.KPI_ABOVE_TARGET_FACTOR):
        return KPIStatus.ABOVE_TARGET
    return KPIStatus.ON_TARGET
