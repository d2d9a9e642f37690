from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from carnet.errors import ValidationError
from carnet.services.card_service import CardService
from carnet.services.session_service import ROLE_STAFF
from carnet.services.student_service import StudentService
from carnet.utils.dates import format_date_es
from carnet.utils.decorators import current_principal, is_self_or_staff, role_required
from carnet.utils.validators import as_text

student_bp = Blueprint("students", __name__)


def _forbidden():
    return jsonify({"success": False, "message": "No autorizado", "code": "forbidden"}), 403


def _staff_actor() -> str:
    identity, _role, _claims = current_principal()
    return identity


@student_bp.get("/")
@role_required(ROLE_STAFF)
def list_students():
    rows = StudentService.list_students(
        search=request.args.get("search"),
        program=request.args.get("program") or None,
        sede=request.args.get("sede") or None,
        status=request.args.get("status") or None,
    )
    return jsonify({"success": True, "count": len(rows), "data": [
        {
            **s.to_dict(include_photo=False),
            "expiry_label": format_date_es(s.expiry_date),
            "status": status.value,
            "status_label": status.label,
        } for s, status in rows
    ]})


@student_bp.get("/filters")
@role_required(ROLE_STAFF)
def filter_options():
    return jsonify({"success": True, "data": StudentService.filter_options()})


@student_bp.get("/<code>")
@jwt_required()
def get_student(code: str):
    if not is_self_or_staff(code):
        return _forbidden()
    s = StudentService.get_student(code)
    return jsonify({"success": True, "data": {**s.to_dict(), "expiry_label": format_date_es(s.expiry_date)}})


@student_bp.post("/")
@role_required(ROLE_STAFF)
def save_student():
    data = request.get_json(silent=True) or {}
    student, created = StudentService.save_student(data)
    return jsonify({"success": True, "created": created, "data": student.to_dict(include_photo=False)}), (201 if created else 200)


@student_bp.put("/<code>")
@role_required(ROLE_STAFF)
def update_student(code: str):
    data = request.get_json(silent=True) or {}
    if data.get("code") and str(data["code"]).strip() != code:
        raise ValidationError("El código del estudiante no se puede modificar.")
    StudentService.get_student(code)
    student, _created = StudentService.save_student({**data, "code": code})
    return jsonify({"success": True, "data": student.to_dict(include_photo=False)})


@student_bp.delete("/<code>")
@role_required(ROLE_STAFF)
def delete_student(code: str):
    StudentService.delete_student(code)
    return jsonify({"success": True})


@student_bp.post("/<code>/reset-password")
@role_required(ROLE_STAFF)
def reset_password(code: str):
    data = request.get_json(silent=True) or {}
    StudentService.reset_password(code, as_text(data.get("new_password")), _staff_actor())
    return jsonify({"success": True, "message": "Contraseña restablecida"})


@student_bp.get("/<code>/card")
@jwt_required()
def card(code: str):
    if not is_self_or_staff(code):
        return _forbidden()
    return jsonify({"success": True, "data": CardService.card_for(code)})


@student_bp.get("/<code>/card/download")
@jwt_required()
def card_download(code: str):
    if not is_self_or_staff(code):
        return _forbidden()
    data = CardService.card_for(code)
    CardService.ensure_download_allowed(code)
    return jsonify({"success": True, "data": data})
