from carnet.models.student import Student
from carnet.extensions import db
from carnet.repositories.base import gateway_call


class StudentRepo:
    @staticmethod
    @gateway_call
    def get(code: str):
        return db.session.get(Student, code)

    @staticmethod
    @gateway_call
    def list_all():
        return Student.query.order_by(Student.code.asc()).all()

    @staticmethod
    @gateway_call
    def list_recent(limit: int = 5):
        return Student.query.order_by(Student.created_at.desc()).limit(limit).all()

    @staticmethod
    @gateway_call
    def count():
        return Student.query.count()

    @staticmethod
    @gateway_call
    def distinct_values(column_name: str):
        column = getattr(Student, column_name)
        rows = db.session.query(column).distinct().order_by(column.asc()).all()
        return [r[0] for r in rows if r[0]]

    @staticmethod
    @gateway_call
    def create(student: Student):
        db.session.add(student)
        db.session.commit()
        return student

    @staticmethod
    @gateway_call
    def update():
        db.session.commit()

    @staticmethod
    @gateway_call
    def delete(student: Student):
        # cascade ORM: también borra sus préstamos
        db.session.delete(student)
        db.session.commit()
