from ..extensions import db
from .base import TimestampMixin


class SubmissionStatus:
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    ALL = (PENDING, ACCEPTED, REJECTED)


class EvidenceSubmission(db.Model, TimestampMixin):
    __tablename__ = "evidence_submissions"

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    kpi_id = db.Column(db.Integer, db.ForeignKey("kpis.id"), nullable=False, index=True)
    evidence_id = db.Column(db.Integer, db.ForeignKey("evidence_items.id"), nullable=False)
    file_url = db.Column(db.String(512), nullable=False)
    description = db.Column(db.Text)

    # PENDING -> ACCEPTED | REJECTED, once
    status = db.Column(db.String(20), nullable=False, default=SubmissionStatus.PENDING, index=True)
    rating = db.Column(db.Integer)  # 1..5, ACCEPTED only
    reject_reason = db.Column(db.Text)  # REJECTED only
    reviewed_at = db.Column(db.DateTime)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"))

    teacher = db.relationship("User", foreign_keys=[teacher_id])
    kpi = db.relationship("KPI")
    evidence = db.relationship("EvidenceItem")

    def to_dict(self):
        return {
            "id": self.id,
            "teacher_id": self.teacher_id,
            "kpi_id": self.kpi_id,
            "kpi_name": self.kpi.name if self.kpi else None,
            "evidence_id": self.evidence_id,
            "evidence_name": self.evidence.name if self.evidence else None,
            "file_url": self.file_url,
            "description": self.description,
            "status": self.status,
            "rating": self.rating,
            "reject_reason": self.reject_reason,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<EvidenceSubmission id={self.id} teacher_id={self.teacher_id} status={self.status}>"
