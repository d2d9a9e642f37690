import json
from datetime import timedelta

import pytest

from carnet.errors import ConflictError, NotFoundError
from carnet.repositories.student_repo import StudentRepo
from carnet.services.card_service import CardService
from carnet.services.export_service import ExportService, to_csv
from carnet.services.loan_service import LoanService
from carnet.services.student_service import StudentService

from conftest import student_payload


def test_encode_decode(app):
    assert CardService.encode("12300298") == "UPAC-12300298"
    assert CardService.decode("UPAC-12300298") == "12300298"
    assert CardService.decode(" 12300298 ") == "12300298"


def test_validate_scan(app, student):
    result = CardService.validate_scan("UPAC-12300298")
    assert result["valid"] is True
    assert result["student"]["status"] == "active"
    assert result["student"]["name"] == "LAURA"

    assert CardService.validate_scan("12300298")["valid"] is True


def test_validate_scan_inactive_card(app, student):
    student.active = False
    StudentRepo.update()
    result = CardService.validate_scan("UPAC-12300298")
    assert result["valid"] is False
    assert result["student"]["status_label"] == "INACTIVO"


@pytest.mark.parametrize("scanned", ["UPAC-00000000", "UPAC-", "basura"])
def test_validate_scan_unknown(app, student, scanned):
    with pytest.raises(NotFoundError) as exc:
        CardService.validate_scan(scanned)
    assert exc.value.code == "invalid_card"


def test_download_gate(app, student, staff_identity):
    assert CardService.card_for(student.code)["download_allowed"] is True
    CardService.ensure_download_allowed(student.code)

    loan = LoanService.register_loan(student.code, "library", "Libros", staff=staff_identity)
    card = CardService.card_for(student.code)
    assert card["download_allowed"] is False
    assert card["active_loans"] == 1
    assert card["card_code"] == "UPAC-12300298"
    with pytest.raises(ConflictError):
        CardService.ensure_download_allowed(student.code)

    LoanService.return_loan(loan.id)
    assert CardService.card_for(student.code)["download_allowed"] is True


def test_to_csv_quoting_and_photo_placeholder():
    rows = [
        {"code": "1", "name": 'Ana "la jefa"', "photo": "data:image/jpeg;base64,AAA", "rh": None},
        {"code": "2", "name": "Luis", "photo": None, "rh": "A+"},
    ]
    assert to_csv(rows) == (
        "code,name,photo,rh\n"
        '"1","Ana ""la jefa""","Foto incluida",""\n'
        '"2","Luis","",' + '"A+"'
    )
    assert to_csv([]) == ""


def test_export_students_json_includes_photo(app, student):
    student.photo = "data:image/jpeg;base64,AAAA"
    StudentRepo.update()

    filename, content, mimetype = ExportService.export("students", "json")
    assert filename == "estudiantes.json"
    assert mimetype == "application/json"
    data = json.loads(content)
    assert data[0]["code"] == "12300298"
    assert data[0]["photo"] == "data:image/jpeg;base64,AAAA"


def test_export_students_csv(app, student, today):
    StudentService.save_student(student_payload(code="100001", national_id="10000001", expiry=today + timedelta(days=40)))
    filename, content, _ = ExportService.export("students", "csv")
    lines = content.split("\n")
    assert filename == "estudiantes.csv"
    assert lines[0].startswith("code,national_id,name")
    assert lines[1].startswith('"100001"')
    assert len(lines) == 3


def test_export_staff_csv(app, staff):
    filename, content, mimetype = ExportService.export("staff", "csv")
    assert filename == "funcionarios.csv"
    assert mimetype == "text/csv"
    assert content.split("\n")[1].startswith(f'"{staff.id}","Ana Gómez"')
