from ..extensions import db
from .base import TimestampMixin


class School(db.Model, TimestampMixin):
    __tablename__ = "schools"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<School id={self.id} name={self.name!r}>"
