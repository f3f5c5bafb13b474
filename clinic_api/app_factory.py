import logging
import os

from flask import Flask, jsonify

from config import DevConfig, ProdConfig, TestConfig
from extensions import db, migrate
from logging_setup import setup_logger
from clinic_api.errors import AuthError, NotFound, StorageError, ValidationFailure


logger = logging.getLogger(__name__)

CONFIGS = {
    "production": ProdConfig,
    "testing": TestConfig,
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(NotFound)
    def handle_not_found(e: NotFound):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(ValidationFailure)
    def handle_validation_failure(e: ValidationFailure):
        return jsonify({"error": e.message, "reason": e.reason}), 400

    @app.errorhandler(AuthError)
    def handle_auth_error(e: AuthError):
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        # details were logged where the failure happened
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_object=None) -> Flask:
    """Initialize Flask app with DB + configuration."""
    app = Flask(__name__)

    if config_object is None:
        config_object = CONFIGS.get(os.getenv("FLASK_ENV", ""), DevConfig)
    app.config.from_object(config_object)

    setup_logger(app.config["LOG_DIR"], to_file=app.config["LOG_TO_FILE"])

    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        # Import models so SQLAlchemy registers tables.
        import clinic_api.models  # noqa: F401
        # Ensure tables exist (useful for SQLite/dev). For production, prefer migrations.
        db.create_all()

    # Register HTTP blueprints
    from clinic_api.routes.appointments import appointments_bp
    from clinic_api.routes.auth import auth_bp
    from clinic_api.routes.clinics import clinics_bp
    from clinic_api.routes.doctors import doctors_bp
    from clinic_api.routes.medicines import medicines_bp
    from clinic_api.routes.patients import patients_bp
    from clinic_api.routes.work_shifts import work_shifts_bp

    for blueprint in (
        auth_bp,
        appointments_bp,
        clinics_bp,
        doctors_bp,
        medicines_bp,
        patients_bp,
        work_shifts_bp,
    ):
        app.register_blueprint(blueprint)

    register_error_handlers(app)

    logger.info(f"[create_app] Started with {config_object.__name__}")
    return app
