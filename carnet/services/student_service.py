from flask import current_app

from carnet.errors import NotFoundError, ValidationError
from carnet.models.student import Student
from carnet.repositories.student_repo import StudentRepo
from carnet.services.card_status import CardStatus, classify_student
from carnet.services.credential_service import CredentialService, SELF
from carnet.utils.dates import is_past_date, parse_expiry, utcnow
from carnet.utils.validators import clean, validate_national_id, validate_student_code

# nombres aceptados en el payload (los del portal original entre paréntesis)
_FIELD_ALIASES = {
    "code": ("code",),
    "national_id": ("national_id", "cedula"),
    "name": ("name",),
    "last_name": ("last_name", "lastname"),
    "program": ("program",),
    "sede": ("sede",),
    "blood_type": ("blood_type", "rh"),
    "expiry_date": ("expiry_date", "expiry"),
    "photo": ("photo",),
    "active": ("active",),
}

_REQUIRED = ("name", "last_name", "code", "national_id", "program", "expiry_date", "sede")


def _pick(data: dict, field: str):
    for key in _FIELD_ALIASES[field]:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _as_bool(value, default=True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "si", "sí", "on")
    return bool(value)


class StudentService:
    @staticmethod
    def get_student(code: str) -> Student:
        student = StudentRepo.get(clean(code))
        if not student:
            raise NotFoundError("Estudiante no encontrado")
        return student

    @staticmethod
    def _validated_fields(data: dict, now) -> dict:
        fields = {
            "code": clean(_pick(data, "code")),
            "national_id": clean(_pick(data, "national_id")),
            "name": clean(_pick(data, "name")).upper(),
            "last_name": clean(_pick(data, "last_name")),
            "program": clean(_pick(data, "program")).upper(),
            "sede": clean(_pick(data, "sede")),
            "blood_type": clean(_pick(data, "blood_type")) or None,
        }
        raw_expiry = _pick(data, "expiry_date")

        missing = [f for f in _REQUIRED if f != "expiry_date" and not fields[f]]
        if missing or not raw_expiry:
            raise ValidationError("Completa todos los campos requeridos.")

        if not validate_student_code(fields["code"]):
            raise ValidationError("El código debe ser numérico de 6 a 12 dígitos.")
        if not validate_national_id(fields["national_id"]):
            raise ValidationError("La cédula debe tener entre 8 y 10 dígitos numéricos.")

        expiry = parse_expiry(raw_expiry)
        if expiry is None:
            raise ValidationError("Fecha de expiración inválida.")
        if is_past_date(expiry, today=now.date()):
            raise ValidationError("La fecha de expiración no puede estar en el pasado.")
        fields["expiry_date"] = expiry
        return fields

    @staticmethod
    def save_student(data: dict, now=None) -> tuple[Student, bool]:
        """
        Crea o actualiza por código. Devuelve (estudiante, creado).
        La contraseña inicial es la cédula (o el código si no hay cédula).
        """
        now = now or utcnow()
        fields = StudentService._validated_fields(data or {}, now)
        photo = _pick(data, "photo")

        existing = StudentRepo.get(fields["code"])
        if existing:
            for key, value in fields.items():
                if key != "code":
                    setattr(existing, key, value)
            if photo:
                existing.photo = photo
            existing.active = _as_bool(_pick(data, "active"), default=True)
            existing.updated_at = now
            StudentRepo.update()
            current_app.logger.info(f"[students] updated {existing.code}")
            return existing, False

        student = Student(
            **fields,
            photo=photo or None,
            active=True,
            first_login=True,
            password_hash=CredentialService.hash(
                CredentialService.default_password(fields["national_id"], fields["code"])
            ),
            password_history=[],
            created_at=now,
            updated_at=now,
        )
        StudentRepo.create(student)
        current_app.logger.info(f"[students] created {student.code}")
        return student, True

    @staticmethod
    def list_students(search=None, program=None, sede=None, status=None, now=None) -> list:
        """[(student, CardStatus)] ordenado por código."""
        now = now or utcnow()
        window = current_app.config.get("EXPIRING_SOON_DAYS", 30)

        if status:
            try:
                wanted = CardStatus(status)
            except ValueError:
                raise ValidationError("Estado inválido")
        else:
            wanted = None

        term = (search or "").strip().lower()
        rows = []
        for s in StudentRepo.list_all():
            if term and not any(
                term in (value or "").lower()
                for value in (s.code, s.national_id, s.name, s.last_name)
            ):
                continue
            if program and s.program != program:
                continue
            if sede and s.sede != sede:
                continue
            card_status = classify_student(s, now, window)
            if wanted and card_status != wanted:
                continue
            rows.append((s, card_status))
        return rows

    @staticmethod
    def filter_options() -> dict:
        return {
            "programs": StudentRepo.distinct_values("program"),
            "sedes": StudentRepo.distinct_values("sede"),
        }

    @staticmethod
    def delete_student(code: str):
        student = StudentService.get_student(code)
        StudentRepo.delete(student)
        current_app.logger.info(f"[students] deleted {student.code} (loans cascaded)")

    @staticmethod
    def reset_password(code: str, new_password: str, changed_by: str, now=None) -> Student:
        student = StudentService.get_student(code)
        return CredentialService.reset_password(student, new_password, changed_by, now=now)

    @staticmethod
    def change_own_password(code: str, new_password: str, now=None) -> Student:
        student = StudentService.get_student(code)
        return CredentialService.change_password(student, new_password, SELF, now=now)
