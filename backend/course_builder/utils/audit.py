from flask import g
from course_builder.extensions import db
from course_builder.models.audit_log import AuditLog
from typing import Optional


def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None,
    actor_id: Optional[str] = None,
):
    """
    Stage an audit row on the current session. The caller commits it,
    normally inside `transactional()`.
    """
    log = AuditLog()

    log.actor_id = actor_id or getattr(g, "current_user_id", None)
    log.action = action
    log.entity_type = entity_type
    log.entity_id = str(entity_id)
    log.payload = payload or {}

    db.session.add(log)
    return log
