from ..extensions import db
from .base import SchoolScopedMixin, TimestampMixin


class EvidenceItem(db.Model, SchoolScopedMixin, TimestampMixin):
    __tablename__ = "evidence_items"
    id = db.Column(db.Integer, primary_key=True)
    kpi_id = db.Column(db.Integer, db.ForeignKey("kpis.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    is_official = db.Column(db.Boolean, nullable=False, default=True)

    kpi = db.relationship("KPI", back_populates="evidence_items")
