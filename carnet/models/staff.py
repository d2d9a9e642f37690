from carnet.utils.dates import utcnow
from carnet.extensions import db


class Staff(db.Model):
    __tablename__ = "staff"

    id = db.Column(db.String(255), primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    password_hash = db.Column(db.String(255), nullable=False)
    password_history = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Staff {self.email}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
