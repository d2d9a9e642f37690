from functools import wraps

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from carnet.errors import ConflictError, GatewayError
from carnet.extensions import db


def gateway_call(fn):
    """Traduce errores de SQLAlchemy a errores de dominio y hace rollback."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except StaleDataError as e:
            db.session.rollback()
            current_app.logger.warning(f"[gateway] {fn.__qualname__}: stale record ({e})")
            raise ConflictError(
                "El registro fue modificado por otra operación. Intenta de nuevo.",
                code="stale_record",
            ) from e
        except IntegrityError as e:
            db.session.rollback()
            current_app.logger.warning(f"[gateway] {fn.__qualname__}: integrity error ({e.orig})")
            raise ConflictError("El registro ya existe", code="duplicate") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"[gateway] {fn.__qualname__} failed: {e}")
            raise GatewayError(str(e)) from e
    return wrapper


@gateway_call
def commit():
    db.session.commit()
