from carnet.utils.dates import utcnow
from carnet.extensions import db


class Student(db.Model):
    __tablename__ = "students"

    code = db.Column(db.String(12), primary_key=True)
    national_id = db.Column(db.String(10), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    program = db.Column(db.String(200), nullable=False, index=True)
    sede = db.Column(db.String(120), nullable=False, index=True)
    blood_type = db.Column(db.String(5), nullable=True)
    photo = db.Column(db.Text, nullable=True)  # data URL Base64

    expiry_date = db.Column(db.Date, nullable=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
    first_login = db.Column(db.Boolean, nullable=False, default=True)

    password_hash = db.Column(db.String(255), nullable=False)
    password_history = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    version = db.Column(db.Integer, nullable=False)

    loans = db.relationship(
        "Loan",
        backref="student",
        cascade="all, delete-orphan",
        order_by="Loan.borrowed_at.desc()",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Student {self.code}>"

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name or ''}".strip()

    def to_dict(self, include_photo: bool = True) -> dict:
        data = {
            "code": self.code,
            "national_id": self.national_id,
            "name": self.name,
            "last_name": self.last_name,
            "program": self.program,
            "sede": self.sede,
            "blood_type": self.blood_type,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "active": bool(self.active),
            "first_login": bool(self.first_login),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_photo:
            data["photo"] = self.photo
        return data
