from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

WIDGET_REGISTRY_KEY = "course_builder.widgets"


def widget_registry():
    """The WidgetRegistry installed on the current app by create_app."""
    return current_app.extensions[WIDGET_REGISTRY_KEY]
