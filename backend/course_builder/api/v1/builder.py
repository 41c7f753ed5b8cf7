from flask import current_app, request, jsonify, make_response
from flask_jwt_extended import jwt_required
from course_builder.application.builder.gate import AllowAllGate, RoleAuthGate
from course_builder.application.builder.session import EditorSession
from course_builder.application.builder.sync import BuilderSync
from course_builder.domain.exceptions import UnsupportedDocumentVersion, ValidationError
from course_builder.domain.serialization import deserialize
from course_builder.domain.surface import SettingsCache, SurfaceNode, extract_from_surface
from course_builder.domain.tree import Document
from course_builder.extensions import widget_registry
from course_builder.normalizers.column import normalize_column
from course_builder.normalizers.document import normalize_document
from course_builder.normalizers.section import normalize_section
from course_builder.normalizers.widget import normalize_widget
from course_builder.stores.database import SQLAlchemyContentStore
from course_builder.utils.audit import log_action
from course_builder.utils.decorators import roles_required
from course_builder.utils.revision import expected_revision_from_request, revision_etag
from course_builder.utils.transaction import transactional
from course_builder.widgets.layout import render_document
from . import v1_bp


def _sync(public=False):
    gate = AllowAllGate() if public else RoleAuthGate(current_app.config["BUILDER_EDITOR_ROLES"])
    return BuilderSync(SQLAlchemyContentStore(), widget_registry(), gate)


def _session(document_id):
    return EditorSession.open(
        _sync(), document_id, expected_revision=expected_revision_from_request()
    )


def _audit(action, document_id, payload=None):
    with transactional():
        log_action(
            action=action,
            entity_type="builder_document",
            entity_id=document_id,
            payload=payload,
        )


def _document_body(document_id, document, revision, **extra):
    body = {
        "document_id": document_id,
        "revision": revision,
        "is_empty": document.is_empty,
        "document": normalize_document(document, widget_registry()),
    }
    body.update(extra)
    return body


def _respond(body, status=200):
    response = make_response(jsonify(body), status)
    if body.get("revision") is not None:
        response.headers["ETag"] = revision_etag(body["revision"])
    return response


def _session_response(session, status=200, **extra):
    ack = session.last_ack
    revision = ack.revision if ack else session.sync.revision(session.document_id)
    return _respond(
        _document_body(session.document_id, session.document, revision, **extra), status
    )


def _order(data):
    order = data.get("order")
    if not isinstance(order, list):
        raise ValidationError("order must be a list of ids")
    return order


# ------------------------
# Activation
# ------------------------

@v1_bp.route("/documents/<document_id>/builder/enable", methods=["POST"])
@jwt_required()
@roles_required()
def enable_builder(document_id):
    sync = _sync()
    sync.enable(document_id)
    _audit("builder.enable", document_id)

    current_app.logger.info("Builder enabled for document %s", document_id)
    return _respond({
        "document_id": document_id,
        "enabled": True,
        "revision": sync.revision(document_id)
    })


@v1_bp.route("/documents/<document_id>/builder/enable", methods=["DELETE"])
@jwt_required()
@roles_required()
def disable_builder(document_id):
    sync = _sync()
    sync.disable(document_id)
    _audit("builder.disable", document_id)

    current_app.logger.info("Builder disabled for document %s", document_id)
    return jsonify({
        "document_id": document_id,
        "enabled": False
    }), 200


# ------------------------
# Whole document
# ------------------------

@v1_bp.route("/documents/<document_id>/builder", methods=["GET"])
@jwt_required()
@roles_required()
def load_builder(document_id):
    sync = _sync()
    document = sync.load(document_id)

    return _respond(_document_body(
        document_id,
        document,
        sync.revision(document_id),
        enabled=sync.is_enabled(document_id),
    ))


@v1_bp.route("/documents/<document_id>/builder", methods=["PUT"])
@jwt_required()
@roles_required()
def save_builder(document_id):
    """
    Replace the stored document. The body holds either `document` (the
    stored JSON shape) or `surface` (an editor surface snapshot).
    """
    data = request.get_json(silent=True) or {}

    if "surface" in data:
        if not isinstance(data["surface"], dict):
            raise ValidationError("surface must be an object")
        document = extract_from_surface(SurfaceNode.from_dict(data["surface"]), SettingsCache())
    elif isinstance(data.get("document"), dict):
        document = deserialize(data["document"])
    else:
        raise ValidationError("Request body must contain a document or a surface")

    ack = _sync().save(document_id, document, expected_revision=expected_revision_from_request())
    _audit("builder.save", document_id, {"revision": ack.revision})

    return _respond(_document_body(
        document_id, document, ack.revision, saved_at=ack.saved_at.isoformat()
    ))


# ------------------------
# Sections
# ------------------------

@v1_bp.route("/documents/<document_id>/builder/sections", methods=["POST"])
@jwt_required()
@roles_required()
def add_section(document_id):
    session = _session(document_id)
    section = session.add_section()
    _audit("builder.section.add", document_id, {"section_id": section.id})

    return _session_response(session, 201, section=normalize_section(section))


@v1_bp.route("/documents/<document_id>/builder/sections/<section_id>", methods=["DELETE"])
@jwt_required()
@roles_required()
def delete_section(document_id, section_id):
    session = _session(document_id)
    session.delete_section(section_id)
    _audit("builder.section.delete", document_id, {"section_id": section_id})

    return _session_response(session)


@v1_bp.route("/documents/<document_id>/builder/sections/reorder", methods=["POST"])
@jwt_required()
@roles_required()
def reorder_sections(document_id):
    data = request.get_json(silent=True) or {}
    order = _order(data)

    session = _session(document_id)
    session.reorder_sections(order)
    _audit("builder.section.reorder", document_id, {"order": order})

    return _session_response(session)


# ------------------------
# Widgets
# ------------------------

@v1_bp.route("/documents/<document_id>/builder/widgets", methods=["POST"])
@jwt_required()
@roles_required()
def add_widget(document_id):
    data = request.get_json(silent=True) or {}

    widget_type = data.get("type")
    if not isinstance(widget_type, str) or not widget_type:
        raise ValidationError("Widget type is required")

    session = _session(document_id)
    widget = session.add_widget(widget_type, data.get("section_id"))
    _audit("builder.widget.add", document_id, {"widget_id": widget.id, "type": widget.type})

    return _session_response(session, 201, widget=normalize_widget(widget))


@v1_bp.route("/documents/<document_id>/builder/widgets/<widget_id>", methods=["DELETE"])
@jwt_required()
@roles_required()
def delete_widget(document_id, widget_id):
    session = _session(document_id)
    widget = session.delete_widget(widget_id)
    _audit("builder.widget.delete", document_id, {"widget_id": widget.id, "type": widget.type})

    return _session_response(session)


@v1_bp.route("/documents/<document_id>/builder/widgets/<widget_id>/settings", methods=["GET"])
@jwt_required()
@roles_required()
def edit_widget(document_id, widget_id):
    session = _session(document_id)
    form = session.settings_form(widget_id)

    return jsonify({
        "document_id": document_id,
        "widget_id": widget_id,
        "fields": form
    })


@v1_bp.route("/documents/<document_id>/builder/widgets/<widget_id>/settings", methods=["PUT"])
@jwt_required()
@roles_required()
def save_widget_settings(document_id, widget_id):
    data = request.get_json(silent=True) or {}
    form = data.get("settings")
    if not isinstance(form, dict):
        raise ValidationError("settings must be an object")

    session = _session(document_id)
    widget = session.update_widget_settings(widget_id, form)
    _audit("builder.widget.update", document_id, {
        "widget_id": widget.id,
        "fields": sorted(widget.settings)
    })

    return _session_response(session, widget=normalize_widget(widget))


@v1_bp.route("/documents/<document_id>/builder/columns/<column_id>/reorder", methods=["POST"])
@jwt_required()
@roles_required()
def reorder_widgets(document_id, column_id):
    data = request.get_json(silent=True) or {}
    order = _order(data)

    session = _session(document_id)
    column = session.reorder_widgets(column_id, order)
    _audit("builder.widget.reorder", document_id, {"column_id": column_id, "order": order})

    return _session_response(session, column=normalize_column(column))


# ------------------------
# Public rendering
# ------------------------

@v1_bp.route("/documents/<document_id>/render", methods=["GET"])
def render_builder(document_id):
    """Rendered markup for visitors; empty unless the builder is on or has content."""
    sync = _sync(public=True)
    try:
        document = sync.load(document_id)
    except UnsupportedDocumentVersion as exc:
        # Visitors get an empty block; editors see the 409 on load
        current_app.logger.warning("Not rendering document %s: %s", document_id, exc)
        document = Document()

    if not sync.is_enabled(document_id) and not document.sections:
        html = ""
    else:
        html = render_document(document, sync.registry)

    response = make_response(html, 200)
    response.mimetype = "text/html"
    return response
