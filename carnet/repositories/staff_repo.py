from carnet.models.staff import Staff
from carnet.extensions import db
from carnet.repositories.base import gateway_call


class StaffRepo:
    @staticmethod
    @gateway_call
    def get_by_email(email: str):
        return Staff.query.filter_by(email=email).first()

    @staticmethod
    @gateway_call
    def find_by_email_or_id(email: str, staff_id: str):
        return Staff.query.filter((Staff.email == email) | (Staff.id == staff_id)).first()

    @staticmethod
    @gateway_call
    def list_all():
        return Staff.query.order_by(Staff.name.asc()).all()

    @staticmethod
    @gateway_call
    def count():
        return Staff.query.count()

    @staticmethod
    @gateway_call
    def create(staff: Staff):
        db.session.add(staff)
        db.session.commit()
        return staff

    @staticmethod
    @gateway_call
    def delete(staff: Staff):
        db.session.delete(staff)
        db.session.commit()
