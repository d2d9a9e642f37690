from datetime import datetime, timedelta

import pytest

from carnet.errors import ConflictError, NotFoundError, ValidationError
from carnet.models.loan import Loan
from carnet.repositories.loan_repo import LoanRepo
from carnet.services.loan_service import LIBRARY_ITEMS, LoanService
from carnet.utils.dates import utcnow


def test_catalog_is_closed_five_items():
    assert len(LIBRARY_ITEMS) == 5
    assert "Computador portátil" in LIBRARY_ITEMS


def test_register_and_return_library_loan(app, student, staff_identity):
    loan = LoanService.register_loan(student.code, "library", "Computador portátil", staff=staff_identity)

    assert loan.status == "active"
    assert loan.returned_at is None
    assert loan.student_name == "LAURA Rentería Mosquera"
    assert loan.staff_email == staff_identity["email"]
    assert loan.staff_name == "Ana Gómez"

    active = LoanService.active_loans_for(student.code)
    assert [l.id for l in active] == [loan.id]
    assert LoanService.has_active_loans(student.code)

    returned = LoanService.return_loan(loan.id)

    assert returned.status == "returned"
    assert returned.returned_at is not None
    assert LoanService.active_loans_for(student.code) == []
    assert not LoanService.has_active_loans(student.code)

    history = LoanService.loans_history()
    assert len(history) == 1
    entry = history[0]
    assert entry["status"] == "returned"
    assert entry["returned_at"] is not None
    elapsed_ms = (returned.returned_at - returned.borrowed_at).total_seconds() * 1000
    assert entry["days_duration"] == int(elapsed_ms // 86400000)


def test_register_for_unknown_student(app, staff_identity):
    with pytest.raises(NotFoundError):
        LoanService.register_loan("00000000", "library", "Libros", staff=staff_identity)
    assert Loan.query.count() == 0


@pytest.mark.parametrize("category,item", [
    ("library", ""),
    ("library", "   "),
    ("library", "Proyector"),
    ("gimnasio", "Balón"),
    (None, "Libros"),
])
def test_register_validation(app, student, staff_identity, category, item):
    with pytest.raises(ValidationError):
        LoanService.register_loan(student.code, category, item, staff=staff_identity)
    assert Loan.query.count() == 0


def test_register_requires_staff_identity(app, student):
    with pytest.raises(ValidationError):
        LoanService.register_loan(student.code, "library", "Libros", staff={})


def test_laboratory_items_are_free_text_and_spanish_aliases(app, student, staff_identity):
    loan = LoanService.register_loan(
        student.code, "laboratorio", "Osciloscopio Tektronix", "Mesa 4", staff=staff_identity,
    )
    assert loan.category == "laboratory"
    assert loan.item_description == "Mesa 4"

    assert LoanService.register_loan(student.code, "Biblioteca", "Libros", staff=staff_identity).category == "library"


def test_no_cap_on_concurrent_loans(app, student, staff_identity):
    for item in LIBRARY_ITEMS:
        LoanService.register_loan(student.code, "library", item, staff=staff_identity)
    assert len(LoanService.active_loans_for(student.code)) == 5


def test_custom_borrowed_at(app, student, staff_identity):
    loan = LoanService.register_loan(
        student.code, "library", "Audífonos", staff=staff_identity, borrowed_at="2026-01-05T14:30:00Z",
    )
    assert loan.borrowed_at == datetime(2026, 1, 5, 14, 30)

    with pytest.raises(ValidationError):
        LoanService.register_loan(student.code, "library", "Audífonos", staff=staff_identity, borrowed_at="ayer")


def test_return_twice_is_conflict_and_keeps_timestamp(app, student, staff_identity):
    loan = LoanService.register_loan(student.code, "library", "Libros", staff=staff_identity)
    first = LoanService.return_loan(loan.id, now=datetime(2026, 4, 1, 9, 0))
    assert first.returned_at == datetime(2026, 4, 1, 9, 0)

    with pytest.raises(ConflictError) as exc:
        LoanService.return_loan(loan.id, now=datetime(2026, 4, 2, 9, 0))
    assert exc.value.code == "already_returned"
    assert LoanRepo.get(loan.id).returned_at == datetime(2026, 4, 1, 9, 0)


def test_return_unknown_loan(app):
    with pytest.raises(NotFoundError):
        LoanService.return_loan(4242)


def test_days_borrowed_on_active_loans(app, student, staff_identity):
    borrowed = utcnow() - timedelta(days=3, hours=2)
    LoanService.register_loan(student.code, "library", "Libros", staff=staff_identity, borrowed_at=borrowed)

    rows = LoanService.active_loans()
    assert rows[0]["days_borrowed"] == 3


def test_active_loans_search_and_order(app, student, staff_identity):
    older = LoanService.register_loan(
        student.code, "library", "Libros", staff=staff_identity, borrowed_at=datetime(2026, 1, 1, 8, 0),
    )
    newer = LoanService.register_loan(
        student.code, "library", "Audífonos", staff=staff_identity, borrowed_at=datetime(2026, 1, 2, 8, 0),
    )

    assert [r["id"] for r in LoanService.active_loans()] == [newer.id, older.id]
    assert len(LoanService.active_loans(search="laura")) == 2
    assert len(LoanService.active_loans(search="1230")) == 2
    assert LoanService.active_loans(search="zzz") == []


def test_history_filters(app, student, staff_identity):
    lib = LoanService.register_loan(student.code, "library", "Libros", staff=staff_identity)
    LoanService.register_loan(student.code, "laboratory", "Multímetro", staff=staff_identity)
    LoanService.return_loan(lib.id)

    assert [r["category"] for r in LoanService.loans_history(category="laboratory")] == ["laboratory"]
    assert [r["id"] for r in LoanService.loans_history(status="returned")] == [lib.id]
    assert len(LoanService.loans_history(student_code=student.code)) == 2
    assert LoanService.loans_history(student_code="55555555") == []

    with pytest.raises(ValidationError):
        LoanService.loans_history(status="lost")
