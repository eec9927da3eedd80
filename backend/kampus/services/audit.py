from __future__ import annotations

import logging
from datetime import date
from enum import Enum

from sqlalchemy.orm import Session

from kampus.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    return value


def log_activity(
    db: Session,
    *,
    institution_id: str | None,
    actor_id: str | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
) -> ActivityLog:
    """Stage an audit row in the caller's transaction; it commits or rolls back with the change it describes."""
    record = ActivityLog(
        institution_id=institution_id,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=_jsonable(details or {}),
    )
    db.add(record)
    logger.debug("audit %s %s/%s by %s", action, entity_type, entity_id, actor_id or "anonymous")
    return record
