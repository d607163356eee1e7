from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Numeric, ForeignKey, Date, JSON, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hrms.db.base import BaseModel
from hrms.models.shared.enums import PeriodType, RiskLevel, enum_values

class KRIDefinition(BaseModel):
    __tablename__ = 'kri_definitions'

    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    metric_type = Column(String(50), nullable=False)
    calculation_formula = Column(JSON, nullable=False)
    threshold_warning = Column(Numeric(12, 2))
    threshold_critical = Column(Numeric(12, 2))
    is_active = Column(Boolean, default=True)

    # Relationships
    metrics = relationship("KRIMetric", back_populates="definition")

class KRIMetric(BaseModel):
    __tablename__ = 'kri_metrics'
    kri_id = Column(Integer, ForeignKey('kri_definitions.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True, index=True)
    department = Column(String(100), nullable=True, index=True)
    period_type = Column(
        SQLEnum(PeriodType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    calculated_value = Column(Numeric(12, 2), nullable=False)
    risk_level = Column(
        SQLEnum(RiskLevel, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    calculated_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    definition = relationship("KRIDefinition", back_populates="metrics")
    user = relationship("User")

# One row per metric key; NULL scope parts compare equal
Index(
    'uq_kri_metric_period',
    KRIMetric.kri_id,
    func.coalesce(KRIMetric.user_id, 0),
    func.coalesce(KRIMetric.department, ''),
    KRIMetric.period_type,
    KRIMetric.period_start,
    KRIMetric.period_end,
    unique=True,
)
