from flask import Flask, current_app, jsonify
from carnet.config import Config
from carnet.extensions import db, migrate, jwt
from carnet.errors import register_error_handlers


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) Primero la base de datos
    db.init_app(app)
    from carnet.models import student, staff, loan  # noqa: F401

    # 2) Demás extensiones
    migrate.init_app(app, db)
    jwt.init_app(app)

    # 3) Sesiones en memoria del proceso (inyectable en tests)
    from carnet.services.session_service import InMemorySessionStore, SessionManager
    app.extensions["session_manager"] = SessionManager(
        InMemorySessionStore(),
        ttl_days=app.config["SESSION_TTL_DAYS"],
    )

    @jwt.token_in_blocklist_loader
    def _session_revoked(_jwt_header, jwt_payload):
        sid = jwt_payload.get("sid")
        return not sid or not current_app.extensions["session_manager"].validate(sid)

    register_error_handlers(app)

    # 4) Blueprints de la API
    from carnet.controllers.auth_controller import auth_bp
    from carnet.controllers.student_controller import student_bp
    from carnet.controllers.staff_controller import staff_bp
    from carnet.controllers.loan_controller import loan_bp
    from carnet.controllers.card_controller import card_bp
    from carnet.controllers.export_controller import export_bp
    from carnet.controllers.dashboard_controller import dashboard_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(student_bp, url_prefix="/students")
    app.register_blueprint(staff_bp, url_prefix="/staff")
    app.register_blueprint(loan_bp, url_prefix="/loans")
    app.register_blueprint(card_bp, url_prefix="/cards")
    app.register_blueprint(export_bp, url_prefix="/export")
    app.register_blueprint(dashboard_bp, url_prefix="/dashboard")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    return app
