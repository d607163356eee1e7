from sqlalchemy import Column, Integer, String, Boolean, Text, Numeric, ForeignKey, JSON, Enum as SQLEnum, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel
from hrms.models.shared.enums import KRAPeriodType, SubmissionStatus, PerformanceCategory, enum_values

class KRADefinition(BaseModel):
    __tablename__ = 'kra_definitions'
    __table_args__ = (
        UniqueConstraint('user_id', 'kra_number', name='uq_kra_definition_user_number'),
    )

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    role = Column(String(100), index=True)
    kra_number = Column(Integer, nullable=False)
    kra_name = Column(String(200), nullable=False)
    description = Column(Text)
    weight_percentage = Column(Numeric(5, 2), nullable=False)
    kpi_1 = Column(Text)
    kpi_2 = Column(Text)
    rating_labels = Column(JSON)  # {"1": "Poor", ..., "5": "Exceptional"}
    is_active = Column(Boolean, default=True)

    # Relationships
    user = relationship("User")
    submissions = relationship("KRASubmission", back_populates="kra")

class KRASubmission(BaseModel):
    __tablename__ = 'kra_submissions'
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    kra_id = Column(Integer, ForeignKey('kra_definitions.id'), nullable=False, index=True)
    period_type = Column(
        SQLEnum(KRAPeriodType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    period_month = Column(Integer)
    period_quarter = Column(Integer)
    period_year = Column(Integer, nullable=False)
    rating = Column(Integer, nullable=False)
    submitted_by = Column(Integer, ForeignKey('users.id'), nullable=False)
    comments = Column(Text)
    status = Column(
        SQLEnum(SubmissionStatus, values_callable=enum_values, native_enum=False, length=20),
        default=SubmissionStatus.SUBMITTED,
        nullable=False,
    )

    # Relationships
    kra = relationship("KRADefinition", back_populates="submissions")

class KRAScore(BaseModel):
    __tablename__ = 'kra_scores'
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    period_type = Column(
        SQLEnum(KRAPeriodType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    period_month = Column(Integer)
    period_quarter = Column(Integer)
    period_year = Column(Integer, nullable=False)
    total_score = Column(Numeric(5, 2), nullable=False)
    performance_category = Column(
        SQLEnum(PerformanceCategory, values_callable=enum_values, native_enum=False, length=30),
        nullable=False,
    )

    # Relationships
    user = relationship("User")

# Unused period parts are NULL and must compare equal
Index(
    'uq_kra_submission_period',
    KRASubmission.user_id,
    KRASubmission.kra_id,
    KRASubmission.period_type,
    func.coalesce(KRASubmission.period_month, 0),
    func.coalesce(KRASubmission.period_quarter, 0),
    KRASubmission.period_year,
    unique=True,
)

Index(
    'uq_kra_score_period',
    KRAScore.user_id,
    KRAScore.period_type,
    func.coalesce(KRAScore.period_month, 0),
    func.coalesce(KRAScore.period_quarter, 0),
    KRAScore.period_year,
    unique=True,
)
