from carnet.models.loan import Loan, LOAN_ACTIVE, LOAN_RETURNED
from carnet.extensions import db
from carnet.repositories.base import gateway_call


class LoanRepo:
    @staticmethod
    @gateway_call
    def get(loan_id: int):
        return db.session.get(Loan, loan_id)

    @staticmethod
    @gateway_call
    def create(loan: Loan):
        db.session.add(loan)
        db.session.commit()
        return loan

    @staticmethod
    @gateway_call
    def mark_returned(loan_id: int, returned_at) -> bool:
        """
        Update condicional: solo pasa a 'returned' si sigue 'active'.
        Devuelve False si otra operación ya lo devolvió (o no existe).
        """
        updated = (
            Loan.query
            .filter(Loan.id == loan_id, Loan.status == LOAN_ACTIVE)
            .update(
                {"status": LOAN_RETURNED, "returned_at": returned_at},
                synchronize_session=False,
            )
        )
        db.session.commit()
        return updated == 1

    @staticmethod
    @gateway_call
    def find(status: str | None = None, category: str | None = None, student_code: str | None = None, limit: int | None = None):
        q = Loan.query
        if status:
            q = q.filter(Loan.status == status)
        if category:
            q = q.filter(Loan.category == category)
        if student_code:
            q = q.filter(Loan.student_code == student_code)
        q = q.order_by(Loan.borrowed_at.desc(), Loan.id.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    @staticmethod
    @gateway_call
    def count_active(student_code: str | None = None) -> int:
        q = Loan.query.filter(Loan.status == LOAN_ACTIVE)
        if student_code:
            q = q.filter(Loan.student_code == student_code)
        return q.count()
