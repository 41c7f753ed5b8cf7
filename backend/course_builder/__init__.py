import logging
import os

from flask import Flask, send_file, current_app
from .config import config_by_name
from .extensions import db, migrate, jwt, WIDGET_REGISTRY_KEY
from .api.v1 import v1_bp
from .errors import register_error_handlers
from .commands import register_commands
from .widgets.catalog import build_default_registry
from flask_swagger_ui import get_swaggerui_blueprint

# Model modules register their tables with db.metadata
from .models import audit_log, content_meta, user  # noqa: F401


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # -------------------------------------------------
    # Logging
    # -------------------------------------------------
    level = app.config["LOG_LEVEL"]
    app.logger.setLevel(level)
    logging.getLogger("course_builder").setLevel(level)

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    app.extensions[WIDGET_REGISTRY_KEY] = build_default_registry()

    # -------------------------------------------------
    # API Blueprints
    # -------------------------------------------------
    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)
    register_commands(app)

    # -------------------------------------------------
    # Serve OpenAPI YAML (PUBLIC)
    # -------------------------------------------------
    @app.route("/openapi/builder.yaml", methods=["GET"], endpoint="openapi_builder")
    def serve_openapi():
        spec_path = os.path.join(
            current_app.root_path,
            "api",
            "v1",
            "builder_openapi.yaml",
        )

        if not os.path.exists(spec_path):
            raise FileNotFoundError("builder_openapi.yaml not found")

        return send_file(
            spec_path,
            mimetype="application/yaml",
            as_attachment=False,
        )

    # -------------------------------------------------
    # Swagger UI
    # -------------------------------------------------
    SWAGGER_URL = "/swagger"
    API_URL = "/openapi/builder.yaml"

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            "app_name": "Course Builder API",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )

    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)

    app.logger.debug("Course builder app created with %s config", config_name)
    return app
