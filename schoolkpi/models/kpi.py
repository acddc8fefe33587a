from ..extensions import db
from .base import SchoolScopedMixin, TimestampMixin


class KPI(db.Model, SchoolScopedMixin, TimestampMixin):
    __tablename__ = "kpis"

    id = db.Column(db.Integer, primary_key=True)
    job_type_id = db.Column(db.Integer, db.ForeignKey("job_types.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    # percentage share of the overall score, 0..100
    weight = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    # NULL = no minimum evidence gate
    min_accepted_evidence = db.Column(db.Integer, nullable=True)
    is_official = db.Column(db.Boolean, nullable=False, default=True)
    # SchoolScopedMixin: school_id (set only for school-specific KPIs)
    # official KPI this school-specific copy replaces for its school
    source_kpi_id = db.Column(db.Integer, db.ForeignKey("kpis.id"), nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)

    job_type = db.relationship("JobType", back_populates="kpis")
    evidence_items = db.relationship("EvidenceItem", back_populates="kpi", lazy="select",
                                     cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<KPI id={self.id} name={self.name!r} weight={self.weight}>"


class SchoolKpiWeight(db.Model, TimestampMixin):
    """Per-school weight / activation of a KPI inside one job type."""
    __tablename__ = "school_kpi_weights"

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False, index=True)
    job_type_id = db.Column(db.Integer, db.ForeignKey("job_types.id"), nullable=False)
    kpi_id = db.Column(db.Integer, db.ForeignKey("kpis.id"), nullable=False)
    weight = db.Column(db.Numeric(5, 2), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.UniqueConstraint('school_id', 'job_type_id', 'kpi_id', name='uq_school_kpi_weights'),
    )

    def __repr__(self):
        return f"<SchoolKpiWeight school_id={self.school_id} kpi_id={self.kpi_id} weight={self.weight} active={self.is_active}>"
