# backend/puantaj/__init__.py
import atexit
from datetime import timedelta

from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.admin import admin_bp
    from .routes.customers import customers_bp, customer_tasks_bp
    from .routes.quotes import quotes_bp, quote_items_bp
    from .routes.payments import customer_payments_bp, contractor_payments_bp, personnel_payments_bp
    from .routes.ledger import ledger_bp
    from .routes.contractors import contractors_bp
    from .routes.personnel import personnel_bp, timesheets_bp
    from .routes.projects import projects_bp
    from .routes.notes import notes_bp
    from .routes.summary import summary_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(customer_tasks_bp)
    app.register_blueprint(quotes_bp)
    app.register_blueprint(quote_items_bp)
    app.register_blueprint(customer_payments_bp)
    app.register_blueprint(contractor_payments_bp)
    app.register_blueprint(personnel_payments_bp)
    app.register_blueprint(ledger_bp)
    app.register_blueprint(contractors_bp)
    app.register_blueprint(personnel_bp)
    app.register_blueprint(timesheets_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(notes_bp)
    app.register_blueprint(summary_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = set(app.config.get("CORS_ALLOWED_ORIGINS", ()))
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Process-scoped state: login throttle counters and the session sweeper
    from .services.login_throttle_service import LoginThrottle
    from .services.session_sweeper import SessionSweeper

    lockout = timedelta(minutes=app.config["LOGIN_LOCKOUT_MINUTES"])
    app.extensions["login_throttle"] = LoginThrottle(
        max_failed_attempts=app.config["LOGIN_MAX_FAILED_ATTEMPTS"],
        lockout_window=lockout,
        lockout_duration=lockout,
    )

    sweeper = SessionSweeper(app, app.config["SESSION_SWEEP_INTERVAL_SECONDS"])
    app.extensions["session_sweeper"] = sweeper
    if sweeper.enabled and not app.config.get("TESTING"):
        sweeper.start()
        atexit.register(sweeper.stop)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
