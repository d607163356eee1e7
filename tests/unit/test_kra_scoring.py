import pytest
from fastapi import HTTPException, status

from hrms.core.exceptions import ValidationError
from hrms.models.shared.enums import KRAPeriodType, PerformanceCategory
from hrms.services.performance.kra_scoring import WeightedRating, compute_kra_score, performance_category
from hrms.services.performance.kra_service import period_key

def ratings(weights, values):
    return [WeightedRating(rating=r, weight_percentage=w) for w, r in zip(weights, values)]

class TestComputeKRAScore:
    def test_all_fives_is_outstanding(self):
        result = compute_kra_score(ratings([40, 30, 30], [5, 5, 5]))
        assert result.total_score == 100.0
        assert result.category == PerformanceCategory.OUTSTANDING

    def test_all_threes_is_good(self):
        result = compute_kra_score(ratings([50, 50], [3, 3]))
        assert result.total_score == 60.0
        assert result.category == PerformanceCategory.GOOD

    def test_empty_is_none(self):
        assert compute_kra_score([]) is None

    def test_idempotent(self):
        items = ratings([25, 25, 50], [4, 2, 5])
        assert compute_kra_score(items) == compute_kra_score(items)

    def test_out_of_range_rating(self):
        with pytest.raises(ValidationError) as exc_info:
            compute_kra_score(ratings([100], [6]))
        assert isinstance(exc_info.value, HTTPException)
        assert exc_info.value.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize("score,expected", [
        (90, PerformanceCategory.OUTSTANDING),
        (89.99, PerformanceCategory.VERY_GOOD),
        (75, PerformanceCategory.VERY_GOOD),
        (60, PerformanceCategory.GOOD),
        (59.5, PerformanceCategory.NEEDS_IMPROVEMENT),
        (50, PerformanceCategory.NEEDS_IMPROVEMENT),
        (49.99, PerformanceCategory.POOR),
    ])
    def test_category_thresholds(self, score, expected):
        assert performance_category(score) == expected

class TestPeriodKey:
    def test_monthly_clears_quarter(self):
        key = period_key(KRAPeriodType.MONTHLY, period_month=5, period_quarter=2, period_year=2024)
        assert key == {
            "period_type": KRAPeriodType.MONTHLY,
            "period_month": 5,
            "period_quarter": None,
            "period_year": 2024,
        }

    def test_quarterly_clears_month(self):
        key = period_key("quarterly", period_month=5, period_quarter=2, period_year=2024)
        assert key["period_month"] is None
        assert key["period_quarter"] == 2

    @pytest.mark.parametrize("kwargs", [
        {"period_type": "monthly"},
        {"period_type": "monthly", "period_month": 13},
        {"period_type": "quarterly", "period_quarter": 0},
        {"period_type": "yearly", "period_month": 1},
    ])
    def test_invalid_keys(self, kwargs):
        with pytest.raises(ValidationError):
            period_key(**kwargs)
