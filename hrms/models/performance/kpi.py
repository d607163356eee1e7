from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Numeric, ForeignKey, Date, JSON, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hrms.db.base import BaseModel
from hrms.models.shared.enums import PeriodType, KPIStatus, enum_values

class KPIDefinition(BaseModel):
    __tablename__ = 'kpi_definitions'

    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    metric_type = Column(String(50), nullable=False)  # percentage, count, rating
    calculation_formula = Column(JSON, nullable=False)  # {"type": "task_completion_rate", ...}
    target_value = Column(Numeric(12, 2))
    is_active = Column(Boolean, default=True)

    # Relationships
    metrics = relationship("KPIMetric", back_populates="definition")

class KPIMetric(BaseModel):
    __tablename__ = 'kpi_metrics'
    kpi_id = Column(Integer, ForeignKey('kpi_definitions.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True, index=True)
    department = Column(String(100), nullable=True, index=True)
    period_type = Column(
        SQLEnum(PeriodType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    calculated_value = Column(Numeric(12, 2), nullable=False)
    target_value = Column(Numeric(12, 2))
    status = Column(
        SQLEnum(KPIStatus, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    calculated_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    definition = relationship("KPIDefinition", back_populates="metrics")
    user = relationship("User")

# One row per metric key; NULL scope parts compare equal
Index(
    'uq_kpi_metric_period',
    KPIMetric.kpi_id,
    func.coalesce(KPIMetric.user_id, 0),
    func.coalesce(KPIMetric.department, ''),
    KPIMetric.period_type,
    KPIMetric.period_start,
    KPIMetric.period_end,
    unique=True,
)
