from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Union

from hrms.core.exceptions import ValidationError
from hrms.models.shared.enums import PerformanceCategory
from hrms.services.performance.formulas import round2

# (floor, category), evaluated high to low
CATEGORY_THRESHOLDS = (
    (90, PerformanceCategory.OUTSTANDING),
    (75, PerformanceCategory.VERY_GOOD),
    (60, PerformanceCategory.GOOD),
    (50, PerformanceCategory.NEEDS_IMPROVEMENT),
)


@dataclass(frozen=True)
class WeightedRating:
    rating: int
    weight_percentage: Union[int, float, Decimal]


@dataclass(frozen=True)
class KRAScoreResult:
    total_score: float
    category: PerformanceCategory


def performance_category(total_score: Union[int, float, Decimal]) -> PerformanceCategory:
    for floor, category in CATEGORY_THRESHOLDS:
        if total_score >= floor:
            return category
    return PerformanceCategory.POOR


def compute_kra_score(submissions: Iterable) -> Optional[KRAScoreResult]:
    """
    Weighted KRA score: sum of weight * rating / 5 over all submissions.

    Returns None when there is nothing to score, so callers never store a
    zero for an empty period. Items need ``rating`` and ``weight_percentage``.
    """
    total = Decimal("0")
    seen = False
    for item in submissions:
        rating = int(item.rating)
        if rating < 1 or rating > 5:
            raise ValidationError(f"Rating must be between 1 and 5, got {rating}")
        weight = Decimal(str(item.weight_percentage))
        total += weight * rating / 5
        seen = True

    if not seen:
        return None

    # Category is decided on the unrounded sum
    return KRAScoreResult(total_score=round2(total), category=performance_category(total))
