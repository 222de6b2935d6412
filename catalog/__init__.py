import logging

from flask import Flask, jsonify
from config import config
from catalog.extensions import db, migrate


def create_app(config_name=None):
    if config_name is None:
        import os

        config_name = os.environ.get("FLASK_CONFIG", "default")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Module loggers under ``catalog.`` propagate to app.logger
    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("catalog").setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can detect them
    from catalog import models  # noqa: F401

    from catalog.routes import register_blueprints

    register_blueprints(app)

    from catalog.cli import categories_cli

    app.cli.add_command(categories_cli)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "kind": "NotFound", "error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return (
            jsonify(
                {"success": False, "kind": "MethodNotAllowed", "error": "Method not allowed"}
            ),
            405,
        )

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.exception("Internal server error")
        db.session.rollback()
        return (
            jsonify(
                {"success": False, "kind": "ServerError", "error": "Internal server error"}
            ),
            500,
        )

    return app
