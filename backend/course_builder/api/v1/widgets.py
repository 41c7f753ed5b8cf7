from flask import request, jsonify
from flask_jwt_extended import jwt_required
from course_builder.domain.exceptions import ValidationError
from course_builder.extensions import widget_registry
from course_builder.normalizers.widget_type import normalize_widget_type
from course_builder.utils.decorators import roles_required
from . import v1_bp


@v1_bp.route("/widgets", methods=["GET"])
@jwt_required()
@roles_required()
def list_widget_types():
    registry = widget_registry()
    return jsonify({
        "widgets": [normalize_widget_type(t) for t in registry]
    })


@v1_bp.route("/widgets/<widget_type>/fields", methods=["GET"])
@jwt_required()
@roles_required()
def get_widget_fields(widget_type):
    entry = widget_registry().get(widget_type)
    return jsonify(normalize_widget_type(entry, include_fields=True))


@v1_bp.route("/widgets/<widget_type>/render", methods=["POST"])
@jwt_required()
@roles_required()
def preview_widget(widget_type):
    """Render one widget from unsaved form values, for the editor preview."""
    data = request.get_json(silent=True) or {}
    form = data.get("settings", {})
    if not isinstance(form, dict):
        raise ValidationError("settings must be an object")

    registry = widget_registry()
    settings = registry.coerce_settings(widget_type, form)

    return jsonify({
        "type": widget_type,
        "settings": settings,
        "html": registry.render(widget_type, settings)
    })
