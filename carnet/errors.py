from flask import jsonify


class CarnetError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(CarnetError):
    status_code = 400
    code = "invalid"


class AuthenticationError(CarnetError):
    status_code = 401
    code = "invalid_credentials"


class NotFoundError(CarnetError):
    status_code = 404
    code = "not_found"


class ConflictError(CarnetError):
    status_code = 409
    code = "conflict"


class GatewayError(CarnetError):
    """Falla de la base de datos (incluye red). Nunca se reintenta."""

    status_code = 502
    code = "gateway_error"


def register_error_handlers(app):
    @app.errorhandler(CarnetError)
    def _handle_carnet_error(e: CarnetError):
        if isinstance(e, GatewayError):
            app.logger.error(f"[gateway] {e.message}")
        return jsonify({"success": False, "message": e.message, "code": e.code}), e.status_code
