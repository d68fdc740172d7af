import os
import logging
from flask import Flask, render_template, request

from extensions import db, migrate
from config import DevConfig, ProdConfig
from logging_setup import setup_logger


logger = logging.getLogger("app_factory")


def create_app(config_object=None) -> Flask:
    """Initialize Flask app with DB + configuration."""
    app = Flask(__name__)

    if config_object is not None:
        app.config.from_object(config_object)
    elif os.getenv("FLASK_ENV") == "production":
        app.config.from_object(ProdConfig)
    else:
        app.config.from_object(DevConfig)

    if not app.config.get("TESTING"):
        setup_logger(app.config.get("LOG_DIR", "logs"))

    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so SQLAlchemy registers tables.
    with app.app_context():
        import src.models  # noqa: F401
        # Ensure tables exist (useful for SQLite/dev). For production, prefer migrations.
        if app.config.get("DEBUG") or app.config.get("TESTING"):
            db.create_all()

    # Register HTTP blueprints
    from src.routes.home import home_bp
    from src.routes.patients import patients_bp
    from src.routes.appointments import appointments_bp
    from src.routes.medicines import medicines_bp

    app.register_blueprint(home_bp)
    app.register_blueprint(patients_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(medicines_bp)

    _register_template_helpers(app)
    _register_error_handlers(app)

    from src.cli import register_cli
    register_cli(app)

    return app


def _register_template_helpers(app: Flask):
    from src.routes.helpers import current_url
    from src.ui import badges, navigation
    from src.ui.calendar_view import type_colors, type_label

    app.jinja_env.globals.update(
        current_url=current_url,
        status_style=badges.status_style,
        initials=badges.initials,
        avatar_style=badges.avatar_style,
        type_colors=type_colors,
        type_label=type_label,
    )

    @app.context_processor
    def inject_navigation():
        from flask import g
        path = request.path if request else "/"
        return {
            "top_nav": navigation.top_nav(path),
            "side_nav": navigation.side_nav(path),
            "current_clinic": g.get("clinic"),
        }


def _register_error_handlers(app: Flask):
    @app.errorhandler(404)
    def not_found(error):
        return render_template("error.html", code=404, message="Page not found."), 404

    @app.errorhandler(500)
    def server_error(error):
        logger.exception(f"[server_error] Unhandled error on {request.path}: {error}")
        db.session.rollback()
        return render_template("error.html", code=500, message="Something went wrong."), 500
