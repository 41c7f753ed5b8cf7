from flask import current_app, jsonify
from course_builder.domain.exceptions import (
    BuilderError,
    Forbidden,
    InvariantViolation,
    NodeNotFound,
    PersistenceError,
    RevisionConflict,
    UnknownWidgetType,
    UnsupportedDocumentVersion,
    ValidationError,
)

# Most specific first; the first matching class decides the status
STATUS_BY_ERROR = (
    (NodeNotFound, 404),
    (UnknownWidgetType, 404),
    (InvariantViolation, 400),
    (ValidationError, 400),
    (Forbidden, 403),
    (RevisionConflict, 409),
    (UnsupportedDocumentVersion, 409),
    (PersistenceError, 503),
)


def status_for(error):
    for error_class, status in STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status
    return 500


def register_error_handlers(app):
    @app.errorhandler(BuilderError)
    def handle_builder_error(error):
        status = status_for(error)

        body = {
            "error": type(error).__name__,
            "message": str(error)
        }
        if isinstance(error, PersistenceError):
            body["retryable"] = True
        if isinstance(error, RevisionConflict):
            body["revision"] = error.actual

        if status >= 500:
            current_app.logger.error("%s: %s", type(error).__name__, error)
        else:
            current_app.logger.info("%s: %s", type(error).__name__, error)

        response = jsonify(body)
        response.status_code = status
        return response
