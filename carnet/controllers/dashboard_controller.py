from flask import Blueprint, jsonify

from carnet.services.session_service import ROLE_STAFF
from carnet.services.stats_service import StatsService
from carnet.utils.decorators import role_required

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/stats")
@role_required(ROLE_STAFF)
def stats():
    return jsonify({"success": True, "data": StatsService.dashboard()})
