from typing import Optional, Dict, Any
from flask import current_app, request
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity, get_jwt

from ..extensions import db
from ..models.audit_log import AuditLog

def _optional_actor():
    """
    Returns (subject, role) for operator requests, (None, None) for token holders.
    """
    try:
        verify_jwt_in_request(optional=True)
        claims = get_jwt() or {}
        return get_jwt_identity(), claims.get("role")
    except Exception:
        return None, None

def audit_log(
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Stage an audit row on the current session; the caller commits."""
    actor, role = _optional_actor()

    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    ua = request.headers.get("User-Agent")

    db.session.add(AuditLog(
        actor=str(actor) if actor else None,
        actor_role=role,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else None,
        ip_address=ip,
        user_agent=ua[:255] if ua else None,
        details=details or None,
    ))

def safe_audit(action: str, entity_type: str, entity_id: str | None = None, details: dict | None = None):
    """
    Best-effort audit in its own commit; never breaks the endpoint.
    """
    try:
        audit_log(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Audit logging failed: %s", action)
