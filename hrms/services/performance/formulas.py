"""Pure KPI/KRI formulas and the calculation_formula tagged variant."""

import json
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Union

from hrms.core.exceptions import UnknownCalculationType, ValidationError
from hrms.models.shared.enums import KPICalculationType, KRICalculationType

_TWO_PLACES = Decimal("0.01")


def round2(value: Union[int, float, Decimal, None]) -> float:
    """Round half-up to two decimals"""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def percentage(numerator: int, denominator: int) -> float:
    if not denominator:
        return 0.0
    return round2(Decimal(numerator) * 100 / Decimal(denominator))


def completion_rate(completed: int, total: int) -> float:
    return percentage(completed, total)


def ontime_rate(on_time: int, completed_with_deadline: int) -> float:
    return percentage(on_time, completed_with_deadline)


def attendance_rate(present_days: int, recorded_days: int) -> float:
    return percentage(present_days, recorded_days)


def average_rating(avg: Optional[Union[float, Decimal]]) -> float:
    return round2(avg or 0)


def inverse_rate(rate: float) -> float:
    """100 - rate, so higher means worse"""
    return round2(Decimal("100") - Decimal(str(rate)))


@dataclass(frozen=True)
class FormulaSpec:
    type: Union[KPICalculationType, KRICalculationType]
    params: Dict[str, Any] = field(default_factory=dict)


def _load_formula(raw: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("calculation_formula is not valid JSON")
    if not isinstance(raw, dict) or not raw.get("type"):
        raise ValidationError("calculation_formula must be an object with a 'type'")
    return raw


def parse_kpi_formula(raw: Union[str, Dict[str, Any], None]) -> FormulaSpec:
    data = _load_formula(raw)
    try:
        kind = KPICalculationType(data["type"])
    except ValueError:
        raise UnknownCalculationType(data["type"], "KPI")
    params = {k: v for k, v in data.items() if k != "type"}
    return FormulaSpec(type=kind, params=params)


def parse_kri_formula(raw: Union[str, Dict[str, Any], None]) -> FormulaSpec:
    data = _load_formula(raw)
    try:
        kind = KRICalculationType(data["type"])
    except ValueError:
        raise UnknownCalculationType(data["type"], "KRI")
    params = {k: v for k, v in data.items() if k != "type"}
    return FormulaSpec(type=kind, params=params)
