import pytest

from carnet.errors import ConflictError, NotFoundError, ValidationError
from carnet.services.credential_service import CredentialService
from carnet.services.staff_service import StaffService

from conftest import STAFF_EMAIL


def test_create_staff(app, staff):
    assert staff.id == STAFF_EMAIL
    assert staff.email == STAFF_EMAIL
    assert CredentialService.verify(staff, "clave-segura")


@pytest.mark.parametrize("email", [
    "ana@gmail.com",
    "ana@udp.edu.co.fake.com",
    "sin-arroba",
])
def test_non_institutional_email_rejected(app, email):
    with pytest.raises(ValidationError):
        StaffService.create_staff({"name": "Ana", "email": email, "password": "x"})


def test_missing_fields(app):
    with pytest.raises(ValidationError):
        StaffService.create_staff({"name": "Ana", "email": "ana@udp.edu"})


def test_duplicate_email_or_id(app, staff):
    with pytest.raises(ConflictError):
        StaffService.create_staff({"name": "Otra", "email": STAFF_EMAIL.upper(), "password": "x"})
    with pytest.raises(ConflictError):
        StaffService.create_staff({"id": STAFF_EMAIL, "name": "Otra", "email": "otra@udp.edu", "password": "x"})


def test_list_sorted_by_name(app, staff):
    StaffService.create_staff({"name": "Carlos Ruiz", "email": "carlos@udp.edu", "password": "x"})
    StaffService.create_staff({"name": "Beatriz Mina", "email": "beatriz@udp.edu", "password": "x"})
    assert [s.name for s in StaffService.list_staff()] == ["Ana Gómez", "Beatriz Mina", "Carlos Ruiz"]


def test_delete_staff(app, staff):
    StaffService.delete_staff(STAFF_EMAIL)
    assert StaffService.list_staff() == []
    with pytest.raises(NotFoundError):
        StaffService.delete_staff(STAFF_EMAIL)
