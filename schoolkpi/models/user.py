from ..extensions import db
from flask_login import UserMixin
from .base import SchoolScopedMixin, TimestampMixin
from werkzeug.security import generate_password_hash, check_password_hash


class Role:
    ADMIN = "ADMIN"
    SCHOOL_MANAGER = "SCHOOL_MANAGER"
    TEACHER = "TEACHER"


class User(db.Model, UserMixin, SchoolScopedMixin, TimestampMixin):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False, default=Role.TEACHER)
    # SchoolScopedMixin: school_id (managers and teachers)
    job_type_id = db.Column(db.Integer, db.ForeignKey("job_types.id"), nullable=True)
    status = db.Column(db.Boolean, nullable=False, default=True)

    job_type = db.relationship("JobType")

    @property
    def is_active(self):
        # Flask-Login refuses to log in disabled accounts
        return bool(self.status)

    def set_password(self, raw):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw):
        return check_password_hash(self.password_hash, raw)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "school_id": self.school_id,
            "job_type_id": self.job_type_id,
            "status": self.status,
        }
