from typing import Optional, Any, Dict

import structlog

from clinic.models import AuditEvent, User

logger = structlog.get_logger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str] = None,
               object_id: Optional[int] = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    """Persist an audit row; anonymous or unsaved actors are recorded as system actions."""
    actor = user if isinstance(user, User) and user.pk else None
    event = AuditEvent.objects.create(
        user=actor,
        action=action,
        object_type=object_type,
        object_id=object_id,
        detail=detail or {},
    )
    logger.debug('audit', action=action, object_type=object_type, object_id=object_id,
                 actor_id=actor.pk if actor else None)
    return event
