from .kpi import KPIDefinition, KPIMetric
from .kri import KRIDefinition, KRIMetric
from .kra import KRADefinition, KRASubmission, KRAScore

__all__ = [
    "KPIDefinition",
    "KPIMetric",
    "KRIDefinition",
    "KRIMetric",
    "KRADefinition",
    "KRASubmission",
    "KRAScore",
]
