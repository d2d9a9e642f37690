from datetime import timedelta

import pytest

from carnet import create_app
from carnet.config import TestConfig
from carnet.extensions import db
from carnet.services.staff_service import StaffService
from carnet.services.student_service import StudentService
from carnet.utils.dates import utcnow

STUDENT_CODE = "12300298"
STUDENT_NATIONAL_ID = "1006543210"
STAFF_EMAIL = "ana.gomez@unipacifico.edu.co"
STAFF_PASSWORD = "clave-segura"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def today():
    return utcnow().date()


def student_payload(code=STUDENT_CODE, national_id=STUDENT_NATIONAL_ID, expiry=None, **extra):
    data = {
        "code": code,
        "national_id": national_id,
        "name": "laura",
        "last_name": "Rentería Mosquera",
        "program": "ingeniería de sistemas",
        "sede": "Buenaventura",
        "blood_type": "O+",
        "expiry_date": (expiry or (utcnow().date() + timedelta(days=365))).isoformat(),
    }
    data.update(extra)
    return data


@pytest.fixture
def student(app):
    s, _created = StudentService.save_student(student_payload())
    return s


@pytest.fixture
def staff(app):
    return StaffService.create_staff({
        "name": "Ana Gómez",
        "email": STAFF_EMAIL,
        "password": STAFF_PASSWORD,
    })


@pytest.fixture
def staff_identity(staff):
    return {"email": staff.email, "name": staff.name}


def _token(client, url, payload):
    resp = client.post(url, json=payload)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["access_token"]


@pytest.fixture
def staff_headers(client, staff):
    token = _token(client, "/auth/staff/login", {"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(client, student):
    token = _token(client, "/auth/student/login", {"code": STUDENT_CODE, "password": STUDENT_NATIONAL_ID})
    return {"Authorization": f"Bearer {token}"}
