from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from carnet.services.loan_service import LIBRARY_ITEMS, LoanService
from carnet.services.session_service import ROLE_STAFF
from carnet.utils.decorators import current_principal, is_self_or_staff, role_required

loan_bp = Blueprint("loans", __name__)


@loan_bp.get("/catalog")
def catalog():
    return jsonify({"success": True, "data": {"library": list(LIBRARY_ITEMS)}})


@loan_bp.post("/")
@role_required(ROLE_STAFF)
def register_loan():
    data = request.get_json(silent=True) or {}
    email, _role, claims = current_principal()
    loan = LoanService.register_loan(
        student_code=data.get("student_code"),
        category=data.get("category"),
        item_type=data.get("item_type"),
        item_description=data.get("item_description"),
        staff={"email": email, "name": claims.get("name")},
        borrowed_at=data.get("borrowed_at"),
    )
    return jsonify({"success": True, "data": loan.to_dict()}), 201


@loan_bp.post("/<int:loan_id>/return")
@role_required(ROLE_STAFF)
def return_loan(loan_id: int):
    loan = LoanService.return_loan(loan_id)
    return jsonify({"success": True, "data": loan.to_dict()})


@loan_bp.get("/active")
@role_required(ROLE_STAFF)
def active_loans():
    data = LoanService.active_loans(search=request.args.get("search"))
    return jsonify({"success": True, "count": len(data), "data": data})


@loan_bp.get("/history")
@role_required(ROLE_STAFF)
def loans_history():
    data = LoanService.loans_history(
        category=request.args.get("category") or None,
        status=request.args.get("status") or None,
        student_code=request.args.get("student_code") or None,
    )
    return jsonify({"success": True, "count": len(data), "data": data})


@loan_bp.get("/student/<code>/active")
@jwt_required()
def student_active_loans(code: str):
    if not is_self_or_staff(code):
        return jsonify({"success": False, "message": "No autorizado", "code": "forbidden"}), 403
    loans = LoanService.active_loans_for(code)
    return jsonify({"success": True, "count": len(loans), "data": [l.to_dict() for l in loans]})
