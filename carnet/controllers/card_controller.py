from flask import Blueprint, request, jsonify

from carnet.errors import ValidationError
from carnet.services.card_service import CardService
from carnet.services.session_service import ROLE_STAFF
from carnet.utils.decorators import role_required
from carnet.utils.validators import as_text

card_bp = Blueprint("cards", __name__)


@card_bp.post("/validate")
@role_required(ROLE_STAFF)
def validate_card():
    data = request.get_json(silent=True) or {}
    scanned = as_text(data.get("code"))
    if not scanned:
        raise ValidationError("Código escaneado vacío")
    return jsonify({"success": True, "data": CardService.validate_scan(scanned)})
