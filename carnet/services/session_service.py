import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Protocol

from flask import current_app
from flask_jwt_extended import create_access_token

from carnet.errors import AuthenticationError, ValidationError
from carnet.repositories.staff_repo import StaffRepo
from carnet.repositories.student_repo import StudentRepo
from carnet.services.credential_service import CredentialService
from carnet.utils.dates import utcnow
from carnet.utils.validators import clean

ROLE_STUDENT = "student"
ROLE_STAFF = "staff"

INVALID_CREDENTIALS = "Credenciales inválidas"
INACTIVE_CARD = "Tu carnet está inactivo. Por favor, contacta con un funcionario para reactivarlo."


class SessionStore(Protocol):
    def get(self, key: str) -> Optional[dict]: ...

    def set(self, key: str, value: dict) -> None: ...

    def clear(self, key: str) -> None: ...


class InMemorySessionStore:
    def __init__(self):
        self._data: dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def set(self, key: str, value: dict) -> None:
        self._data[key] = dict(value)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


@dataclass
class Session:
    session_id: str
    role: str
    identity: dict
    expires_at: datetime
    created_at: datetime = field(default_factory=utcnow)

    def is_valid(self, now=None) -> bool:
        return self.expires_at > (now or utcnow())

    @property
    def subject(self) -> str:
        if self.role == ROLE_STUDENT:
            return self.identity["code"]
        return self.identity["email"]

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "role": self.role,
            "identity": dict(self.identity),
            "expires_at": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        return cls(
            session_id=data["session_id"],
            role=data["role"],
            identity=dict(data["identity"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


class SessionManager:
    def __init__(self, store: SessionStore, ttl_days: int = 7):
        self.store = store
        self.ttl = timedelta(days=ttl_days)

    def login(self, kind: str, identifier: str, password: str, now=None) -> Session:
        now = now or utcnow()
        if kind == ROLE_STUDENT:
            identity = self._authenticate_student(identifier, password)
        elif kind == ROLE_STAFF:
            identity = self._authenticate_staff(identifier, password)
        else:
            raise ValidationError("Tipo de usuario inválido")

        session = Session(
            session_id=secrets.token_hex(32),
            role=kind,
            identity=identity,
            expires_at=now + self.ttl,
            created_at=now,
        )
        self.store.set(session.session_id, session.to_dict())
        current_app.logger.info(f"[auth] {kind} login ok: {session.subject}")
        return session

    @staticmethod
    def _authenticate_student(code: str, password: str) -> dict:
        student = StudentRepo.get(clean(code))
        # mismo mensaje para código desconocido y contraseña errónea
        if not CredentialService.verify(student, password):
            current_app.logger.warning(f"[auth] student login failed: {clean(code)}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if student.active is False:
            current_app.logger.warning(f"[auth] inactive card login: {student.code}")
            raise AuthenticationError(INACTIVE_CARD, code="inactive_card")
        return {
            "code": student.code,
            "name": student.name,
            "last_name": student.last_name,
            "first_login": bool(student.first_login),
        }

    @staticmethod
    def _authenticate_staff(email: str, password: str) -> dict:
        staff = StaffRepo.get_by_email(clean(email).lower())
        if not CredentialService.verify(staff, password):
            current_app.logger.warning(f"[auth] staff login failed: {clean(email)}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        return {"id": staff.id, "email": staff.email, "name": staff.name}

    def get(self, session_id: str, now=None) -> Optional[Session]:
        if not session_id:
            return None
        raw = self.store.get(session_id)
        if not raw:
            return None
        session = Session.from_dict(raw)
        if not session.is_valid(now):
            # expiración perezosa: se purga al consultarla
            self.store.clear(session_id)
            return None
        return session

    def validate(self, session_id: str, now=None) -> bool:
        return self.get(session_id, now) is not None

    def logout(self, session_id: str) -> None:
        if session_id:
            self.store.clear(session_id)


def get_session_manager() -> SessionManager:
    return current_app.extensions["session_manager"]


def issue_access_token(session: Session, now=None) -> str:
    """JWT atado a la sesión (claim 'sid'); logout lo revoca."""
    now = now or utcnow()
    return create_access_token(
        identity=session.subject,
        additional_claims={"role": session.role, "sid": session.session_id, "name": session.identity.get("name")},
        expires_delta=max(session.expires_at - now, timedelta(seconds=1)),
    )
