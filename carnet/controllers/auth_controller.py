from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from carnet.errors import ValidationError
from carnet.services.credential_service import CredentialService
from carnet.services.session_service import (
    ROLE_STAFF,
    ROLE_STUDENT,
    get_session_manager,
    issue_access_token,
)
from carnet.services.staff_service import StaffService
from carnet.services.student_service import StudentService
from carnet.utils.decorators import current_principal
from carnet.utils.validators import as_text

auth_bp = Blueprint("auth", __name__)


def _login(kind: str, identifier_field: str):
    data = request.get_json(silent=True) or {}
    identifier = as_text(data.get(identifier_field))
    password = as_text(data.get("password"))

    if not identifier or not password:
        return jsonify({"success": False, "message": "Completa todos los campos.", "code": "invalid"}), 400

    session = get_session_manager().login(kind, identifier, password)
    return jsonify({
        "success": True,
        "access_token": issue_access_token(session),
        "session": session.to_dict(),
    })


@auth_bp.post("/student/login")
def student_login():
    return _login(ROLE_STUDENT, "code")


@auth_bp.post("/staff/login")
def staff_login():
    return _login(ROLE_STAFF, "email")


@auth_bp.post("/logout")
@jwt_required()
def logout():
    _identity, _role, claims = current_principal()
    get_session_manager().logout(claims.get("sid"))
    return jsonify({"success": True, "message": "Sesión cerrada"})


@auth_bp.get("/session")
@jwt_required()
def current_session():
    _identity, _role, claims = current_principal()
    session = get_session_manager().get(claims.get("sid"))
    return jsonify({"success": True, "data": session.to_dict() if session else None})


@auth_bp.post("/change-password")
@jwt_required()
def change_password():
    """Cambio de contraseña propio; cierra la sesión para volver a entrar."""
    data = request.get_json(silent=True) or {}
    p1 = as_text(data.get("new_password"))
    p2 = as_text(data.get("confirm_password"))
    if not p1 or not p2 or p1 != p2:
        raise ValidationError("Asegúrate de llenar ambos campos y que coincidan.")

    identity, role, claims = current_principal()
    if role == ROLE_STUDENT:
        StudentService.change_own_password(identity, p1)
    else:
        CredentialService.change_password(StaffService.get_staff(identity), p1)

    get_session_manager().logout(claims.get("sid"))
    return jsonify({
        "success": True,
        "message": "Contraseña actualizada. Inicia sesión nuevamente con tu nueva contraseña.",
    })
