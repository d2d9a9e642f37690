from flask import current_app

from carnet.errors import ConflictError, NotFoundError, ValidationError
from carnet.models.loan import Loan, LOAN_ACTIVE, LOAN_RETURNED
from carnet.repositories.loan_repo import LoanRepo
from carnet.repositories.student_repo import StudentRepo
from carnet.utils.dates import parse_timestamp, utcnow, whole_days_between
from carnet.utils.validators import clean

CATEGORY_LIBRARY = "library"
CATEGORY_LABORATORY = "laboratory"

# Catálogo cerrado de biblioteca; laboratorio es texto libre
LIBRARY_ITEMS = (
    "Computador de escritorio",
    "Computador portátil",
    "Audífonos",
    "Libros",
    "Juegos de mesa",
)

_CATEGORY_ALIASES = {
    "library": CATEGORY_LIBRARY,
    "biblioteca": CATEGORY_LIBRARY,
    "laboratory": CATEGORY_LABORATORY,
    "laboratorio": CATEGORY_LABORATORY,
}


class LoanService:
    @staticmethod
    def normalize_category(category) -> str:
        value = _CATEGORY_ALIASES.get(str(category or "").strip().lower())
        if not value:
            raise ValidationError("Categoría inválida (library o laboratory)")
        return value

    @staticmethod
    def days_borrowed(loan: Loan, now=None) -> int:
        return whole_days_between(loan.borrowed_at, now or utcnow())

    @staticmethod
    def days_duration(loan: Loan, now=None) -> int:
        end = loan.returned_at or now or utcnow()
        return whole_days_between(loan.borrowed_at, end)

    @staticmethod
    def register_loan(
        student_code: str,
        category: str,
        item_type: str,
        item_description: str | None = None,
        staff: dict | None = None,
        borrowed_at=None,
    ) -> Loan:
        category = LoanService.normalize_category(category)

        item_type = clean(item_type)
        if not item_type:
            raise ValidationError("Por favor seleccione o ingrese un ítem")
        if category == CATEGORY_LIBRARY and item_type not in LIBRARY_ITEMS:
            raise ValidationError(f"Ítem de biblioteca desconocido: {item_type}")

        staff = staff or {}
        staff_email = clean(staff.get("email"))
        if not staff_email:
            raise ValidationError("No se pudo obtener información del funcionario")

        try:
            borrowed_at = parse_timestamp(borrowed_at) or utcnow()
        except ValueError:
            raise ValidationError("Fecha/hora de préstamo inválida")

        student = StudentRepo.get(clean(student_code))
        if not student:
            raise NotFoundError("Estudiante no encontrado")

        loan = Loan(
            student_code=student.code,
            student_name=student.full_name,
            category=category,
            item_type=item_type,
            item_description=clean(item_description) or None,
            staff_email=staff_email,
            staff_name=clean(staff.get("name")) or None,
            borrowed_at=borrowed_at,
            returned_at=None,
            status=LOAN_ACTIVE,
        )
        LoanRepo.create(loan)
        current_app.logger.info(
            f"[loans] registered loan={loan.id} student={loan.student_code} "
            f"item='{loan.item_type}' by={staff_email}"
        )
        return loan

    @staticmethod
    def return_loan(loan_id: int, now=None) -> Loan:
        """
        Un préstamo devuelto es terminal: devolverlo otra vez es ConflictError
        y no se vuelve a sellar returned_at.
        """
        now = now or utcnow()
        if LoanRepo.mark_returned(loan_id, now):
            loan = LoanRepo.get(loan_id)
            current_app.logger.info(f"[loans] returned loan={loan_id} student={loan.student_code}")
            return loan

        loan = LoanRepo.get(loan_id)
        if not loan:
            raise NotFoundError("Préstamo no encontrado")
        raise ConflictError("Este préstamo ya fue devuelto", code="already_returned")

    @staticmethod
    def active_loans_for(student_code: str) -> list:
        return LoanRepo.find(status=LOAN_ACTIVE, student_code=clean(student_code))

    @staticmethod
    def has_active_loans(student_code: str) -> bool:
        return LoanRepo.count_active(clean(student_code)) > 0

    @staticmethod
    def active_loans(search: str | None = None, now=None) -> list:
        now = now or utcnow()
        loans = LoanRepo.find(status=LOAN_ACTIVE)

        term = (search or "").strip().lower()
        if term:
            loans = [
                l for l in loans
                if term in (l.student_code or "").lower() or term in (l.student_name or "").lower()
            ]

        return [{**l.to_dict(), "days_borrowed": LoanService.days_borrowed(l, now)} for l in loans]

    @staticmethod
    def loans_history(category=None, status=None, student_code=None, now=None) -> list:
        now = now or utcnow()
        if category:
            category = LoanService.normalize_category(category)
        if status and status not in (LOAN_ACTIVE, LOAN_RETURNED):
            raise ValidationError("Estado inválido (active o returned)")

        loans = LoanRepo.find(status=status, category=category, student_code=clean(student_code) or None)
        return [{**l.to_dict(), "days_duration": LoanService.days_duration(l, now)} for l in loans]
