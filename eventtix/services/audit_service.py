import json
import uuid

from sqlalchemy.orm import Session

from eventtix.models.audit_log import AuditLog


def log_audit(db: Session, actor_email: str, action: str, entity_type: str, entity_id: str,
              details: dict | None = None) -> AuditLog:
    """Add an audit entry to the session; the caller commits it with the change it describes."""
    entry = AuditLog(
        id=str(uuid.uuid4()),
        actor_email=actor_email,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
    )
    db.add(entry)
    return entry
