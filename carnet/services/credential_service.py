import hashlib
import hmac

from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from carnet.errors import ValidationError
from carnet.models.student import Student
from carnet.repositories.base import commit
from carnet.utils.dates import utcnow

SELF = "self"


def _sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class CredentialService:
    @staticmethod
    def hash(password: str, method: str | None = None) -> str:
        """
        'sha256' (por defecto): digest hex determinístico, el formato de los
        registros existentes. Cualquier otro método se delega a werkzeug.
        """
        method = method or current_app.config.get("PASSWORD_HASH_METHOD", "sha256")
        if method == "sha256":
            return _sha256_hex(password)
        return generate_password_hash(password, method=method)

    @staticmethod
    def verify(principal, supplied_password) -> bool:
        if principal is None or supplied_password is None:
            return False
        stored = getattr(principal, "password_hash", None)
        if not stored:
            return False
        # werkzeug: "método$sal$hash"
        if "$" in stored:
            return check_password_hash(stored, supplied_password)
        return hmac.compare_digest(stored, _sha256_hex(supplied_password))

    @staticmethod
    def default_password(national_id: str | None, code: str) -> str:
        return national_id or code

    @staticmethod
    def _apply_change(principal, new_password: str, changed_by: str, now):
        if not new_password or not str(new_password).strip():
            raise ValidationError("La contraseña no puede estar vacía")

        limit = current_app.config.get("PASSWORD_HISTORY_LIMIT", 10)
        history = list(principal.password_history or [])
        history.append({"changedAt": now.isoformat(), "changedBy": changed_by})

        principal.password_hash = CredentialService.hash(new_password)
        principal.password_history = history[-limit:]
        principal.updated_at = now

    @staticmethod
    def change_password(principal, new_password: str, changed_by: str = SELF, now=None):
        now = now or utcnow()
        CredentialService._apply_change(principal, new_password, changed_by, now)
        if isinstance(principal, Student) and changed_by == SELF:
            principal.first_login = False
        commit()
        current_app.logger.info(f"[credentials] password changed for {principal!r} by {changed_by}")
        return principal

    @staticmethod
    def reset_password(principal, new_password: str, changed_by: str, now=None):
        now = now or utcnow()
        CredentialService._apply_change(principal, new_password, changed_by, now)
        if isinstance(principal, Student):
            # obliga a cambiarla en el siguiente login
            principal.first_login = True
        commit()
        current_app.logger.info(f"[credentials] password reset for {principal!r} by {changed_by}")
        return principal
