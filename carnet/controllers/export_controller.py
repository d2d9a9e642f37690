from flask import Blueprint, Response

from carnet.services.export_service import ExportService
from carnet.services.session_service import ROLE_STAFF
from carnet.utils.decorators import role_required

export_bp = Blueprint("export", __name__)


@export_bp.get("/<kind>.<fmt>")
@role_required(ROLE_STAFF)
def export(kind: str, fmt: str):
    filename, content, mimetype = ExportService.export(kind, fmt)
    return Response(
        content,
        mimetype=mimetype,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
