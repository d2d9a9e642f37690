from flask import Blueprint, request, jsonify

from carnet.services.session_service import ROLE_STAFF
from carnet.services.staff_service import StaffService
from carnet.utils.decorators import current_principal, role_required
from carnet.utils.validators import as_text

staff_bp = Blueprint("staff", __name__)


@staff_bp.get("/")
@role_required(ROLE_STAFF)
def list_staff():
    return jsonify({"success": True, "data": [s.to_dict() for s in StaffService.list_staff()]})


@staff_bp.post("/")
@role_required(ROLE_STAFF)
def create_staff():
    data = request.get_json(silent=True) or {}
    staff = StaffService.create_staff(data)
    return jsonify({"success": True, "data": {**staff.to_dict(), "role": ROLE_STAFF}}), 201


@staff_bp.delete("/<email>")
@role_required(ROLE_STAFF)
def delete_staff(email: str):
    StaffService.delete_staff(email)
    return jsonify({"success": True})


@staff_bp.post("/<email>/reset-password")
@role_required(ROLE_STAFF)
def reset_password(email: str):
    data = request.get_json(silent=True) or {}
    actor, _role, _claims = current_principal()
    StaffService.reset_password(email, as_text(data.get("new_password")), actor)
    return jsonify({"success": True, "message": "Contraseña del funcionario actualizada."})
