"""
Audit logging for appointment lifecycle events.
"""
import json
import logging
from typing import Any, Optional

from app.extensions import db
from app.models import AuditLog

logger = logging.getLogger(__name__)


def log_audit(
    entity_type: str,
    action: str,
    actor_id: Optional[Any] = None,
    actor_role: Optional[str] = None,
    entity_id: Optional[Any] = None,
    details: Optional[dict] = None,
) -> None:
    """Append an audit log entry. Failure is logged, never raised."""
    try:
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            action=action,
            actor_id=str(actor_id) if actor_id is not None else None,
            actor_role=actor_role,
            details=json.dumps(details, default=str) if details else None,
        )
        db.session.add(entry)
        db.session.commit()
    except Exception as e:
        logger.warning("Audit log failed: %s", e)
        db.session.rollback()
