from flask import current_app

from carnet.errors import ConflictError, NotFoundError, ValidationError
from carnet.models.staff import Staff
from carnet.repositories.staff_repo import StaffRepo
from carnet.services.credential_service import CredentialService
from carnet.utils.dates import utcnow
from carnet.utils.validators import as_text, clean, is_institutional_email


class StaffService:
    @staticmethod
    def list_staff():
        return StaffRepo.list_all()

    @staticmethod
    def get_staff(email: str) -> Staff:
        staff = StaffRepo.get_by_email(clean(email).lower())
        if not staff:
            raise NotFoundError("Funcionario no encontrado")
        return staff

    @staticmethod
    def create_staff(data: dict, now=None) -> Staff:
        now = now or utcnow()
        data = data or {}
        name = clean(data.get("name"))
        email = clean(data.get("email")).lower()
        password = as_text(data.get("password"))

        if not name or not email or not password:
            raise ValidationError("Nombre, email y contraseña son obligatorios")

        domains = current_app.config["INSTITUTIONAL_EMAIL_DOMAINS"]
        if not is_institutional_email(email, domains):
            allowed = " o ".join(f"@{d}" for d in domains)
            raise ValidationError(f"Email debe ser institucional ({allowed})")

        staff_id = clean(data.get("id")) or email
        if StaffRepo.find_by_email_or_id(email, staff_id):
            raise ConflictError("El funcionario ya existe", code="staff_exists")

        staff = Staff(
            id=staff_id,
            name=name,
            email=email,
            password_hash=CredentialService.hash(password),
            password_history=[],
            created_at=now,
            updated_at=now,
        )
        StaffRepo.create(staff)
        current_app.logger.info(f"[staff] created {email}")
        return staff

    @staticmethod
    def delete_staff(email: str):
        staff = StaffService.get_staff(email)
        StaffRepo.delete(staff)
        current_app.logger.info(f"[staff] deleted {staff.email}")

    @staticmethod
    def reset_password(email: str, new_password: str, changed_by: str, now=None) -> Staff:
        staff = StaffService.get_staff(email)
        return CredentialService.reset_password(staff, new_password, changed_by, now=now)
