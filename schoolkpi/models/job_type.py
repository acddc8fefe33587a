from ..extensions import db
from .base import TimestampMixin


class JobType(db.Model, TimestampMixin):
    __tablename__ = "job_types"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    active = db.Column(db.Boolean, nullable=False, default=True)

    kpis = db.relationship("KPI", back_populates="job_type", lazy="select")

    def __repr__(self) -> str:
        return f"<JobType id={self.id} name={self.name!r}>"
