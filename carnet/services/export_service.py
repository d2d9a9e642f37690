import json

from carnet.errors import ValidationError
from carnet.repositories.staff_repo import StaffRepo
from carnet.repositories.student_repo import StudentRepo

PHOTO_PLACEHOLDER = "Foto incluida"

_FILENAMES = {
    "students": "estudiantes",
    "staff": "funcionarios",
}

_MIMETYPES = {
    "json": "application/json",
    "csv": "text/csv",
}


def to_json(rows: list) -> str:
    return json.dumps(rows, indent=2, ensure_ascii=False, default=str)


def _csv_value(key, value) -> str:
    if key == "photo" and value:
        return f'"{PHOTO_PLACEHOLDER}"'
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def to_csv(rows: list) -> str:
    """Encabezado sin comillas; cada valor entre comillas dobles."""
    if not rows:
        return ""
    headers = list(rows[0].keys())
    lines = [",".join(headers)]
    for r in rows:
        lines.append(",".join(_csv_value(h, r.get(h)) for h in headers))
    return "\n".join(lines)


class ExportService:
    @staticmethod
    def rows(kind: str) -> list:
        if kind == "students":
            return [s.to_dict() for s in StudentRepo.list_all()]
        if kind == "staff":
            return [s.to_dict() for s in StaffRepo.list_all()]
        raise ValidationError("Tipo de exportación inválido (students o staff)")

    @staticmethod
    def export(kind: str, fmt: str) -> tuple[str, str, str]:
        """-> (nombre de archivo, contenido, mimetype)"""
        if fmt not in _MIMETYPES:
            raise ValidationError("Formato inválido (json o csv)")
        rows = ExportService.rows(kind)
        content = to_json(rows) if fmt == "json" else to_csv(rows)
        return f"{_FILENAMES[kind]}.{fmt}", content, _MIMETYPES[fmt]
