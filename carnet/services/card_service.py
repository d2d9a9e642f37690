from flask import current_app

from carnet.errors import ConflictError, NotFoundError
from carnet.repositories.student_repo import StudentRepo
from carnet.services.card_status import CardStatus, classify_student
from carnet.services.loan_service import LoanService
from carnet.utils.dates import format_date_es, utcnow


def _prefix() -> str:
    return current_app.config.get("CARD_CODE_PREFIX", "UPAC-")


class CardService:
    @staticmethod
    def encode(code: str) -> str:
        return f"{_prefix()}{code}"

    @staticmethod
    def decode(scanned: str) -> str:
        """'UPAC-12300298' -> '12300298'. Sin prefijo se toma todo como código."""
        text = (scanned or "").strip()
        prefix = _prefix()
        if text.startswith(prefix):
            return text[len(prefix):]
        return text

    @staticmethod
    def _summary(student, status: CardStatus) -> dict:
        return {
            "code": student.code,
            "national_id": student.national_id,
            "name": student.name,
            "last_name": student.last_name,
            "program": student.program,
            "sede": student.sede,
            "expiry_date": student.expiry_date.isoformat(),
            "expiry_label": format_date_es(student.expiry_date),
            "active": bool(student.active),
            "status": status.value,
            "status_label": status.label,
        }

    @staticmethod
    def validate_scan(scanned: str, now=None) -> dict:
        now = now or utcnow()
        code = CardService.decode(scanned)
        student = StudentRepo.get(code) if code else None
        if not student:
            current_app.logger.info(f"[cards] invalid scan: {scanned!r}")
            raise NotFoundError(
                "El código del carnet no es válido o no se encuentra registrado en el sistema.",
                code="invalid_card",
            )

        status = classify_student(student, now, current_app.config.get("EXPIRING_SOON_DAYS", 30))
        valid = status in (CardStatus.ACTIVE, CardStatus.EXPIRING_SOON)
        current_app.logger.info(f"[cards] scan {student.code}: {status.value}")
        return {"valid": valid, "student": CardService._summary(student, status)}

    @staticmethod
    def card_for(code: str, now=None) -> dict:
        now = now or utcnow()
        student = StudentRepo.get(code)
        if not student:
            raise NotFoundError("Estudiante no encontrado")

        status = classify_student(student, now, current_app.config.get("EXPIRING_SOON_DAYS", 30))
        active_loans = LoanService.active_loans_for(student.code)
        return {
            "card_code": CardService.encode(student.code),
            "student": {**CardService._summary(student, status), "blood_type": student.blood_type, "photo": student.photo},
            "active_loans": len(active_loans),
            "download_allowed": not active_loans,
        }

    @staticmethod
    def ensure_download_allowed(code: str):
        if LoanService.has_active_loans(code):
            raise ConflictError(
                "Tienes préstamos activos. Devuélvelos antes de descargar tu carnet.",
                code="active_loans",
            )
