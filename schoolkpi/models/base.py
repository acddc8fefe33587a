from ..extensions import db


class SchoolScopedMixin:
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=True, index=True)


class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
