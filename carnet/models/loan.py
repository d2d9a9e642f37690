from carnet.utils.dates import utcnow
from carnet.extensions import db

LOAN_ACTIVE = "active"
LOAN_RETURNED = "returned"


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column(db.Integer, primary_key=True)

    student_code = db.Column(
        db.String(12),
        db.ForeignKey("students.code", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_name = db.Column(db.String(250), nullable=False)

    category = db.Column(db.String(20), nullable=False, index=True)  # library/laboratory
    item_type = db.Column(db.String(200), nullable=False)
    item_description = db.Column(db.String(500), nullable=True)

    # registrado por (sin FK: borrar un funcionario no borra sus préstamos)
    staff_email = db.Column(db.String(255), nullable=False, index=True)
    staff_name = db.Column(db.String(200), nullable=True)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    returned_at = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=LOAN_ACTIVE, index=True)  # active/returned

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Loan {self.id} {self.student_code} {self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_code": self.student_code,
            "student_name": self.student_name,
            "category": self.category,
            "item_type": self.item_type,
            "item_description": self.item_description,
            "staff_email": self.staff_email,
            "staff_name": self.staff_name,
            "borrowed_at": self.borrowed_at.isoformat() if self.borrowed_at else None,
            "returned_at": self.returned_at.isoformat() if self.returned_at else None,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
