"""Check-then-write units of work backed by the exclusivity indexes.

The conflict checks run inside the same session as the write. A concurrent
writer can still slip in between check and commit; the partial unique
indexes reject it at flush/commit time and the whole unit is re-run once so
the loser gets the precise business error from the checks.
"""
from __future__ import annotations

import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kampus.core.config import get_settings
from kampus.core.exceptions import AppError, ConcurrencyConflictError
from kampus.models.assignment import GROUP_SLOT_INDEX, TEACHER_SLOT_INDEX
from kampus.models.placement import ASSIGNMENT_SLOT_INDEX, ROOM_SLOT_INDEX

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLite reports the violated columns instead of the index name.
_INDEX_SIGNATURES: dict[str, tuple[str, ...]] = {
    TEACHER_SLOT_INDEX: (TEACHER_SLOT_INDEX, "assignments.teacher_id"),
    GROUP_SLOT_INDEX: (GROUP_SLOT_INDEX, "assignments.group_id"),
    ROOM_SLOT_INDEX: (ROOM_SLOT_INDEX, "placements.classroom_id"),
    ASSIGNMENT_SLOT_INDEX: (ASSIGNMENT_SLOT_INDEX, "placements.assignment_id"),
}


def violated_index(exc: IntegrityError) -> str | None:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    for index_name, signatures in _INDEX_SIGNATURES.items():
        if any(signature in message for signature in signatures):
            return index_name
    return None


def _attempt(db: Session, work: Callable[[], T]) -> T:
    try:
        result = work()
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        constraint = violated_index(exc)
        if constraint is None:
            # Only exclusivity-index violations are retried.
            raise
        raise ConcurrencyConflictError(details={"constraint": constraint}) from exc
    except AppError:
        db.rollback()
        raise
    return result


def run_checked_write(
    db: Session,
    work: Callable[[], T],
    *,
    translate: Callable[[ConcurrencyConflictError], AppError],
    retries: int | None = None,
) -> T:
    """Run ``work`` (checks + staged writes) and commit it as one unit.

    ``work`` must re-read everything it needs; it is called again from a
    clean session after a rejected commit. When the retry budget is spent
    the index violation is handed to ``translate`` so it surfaces as the
    matching business-rule error. Integrity errors raised by any other
    constraint propagate from the first attempt unchanged.
    """
    if retries is None:
        retries = get_settings().schedule_commit_retries
    attempts = retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return _attempt(db, work)
        except ConcurrencyConflictError as error:
            if attempt < attempts:
                logger.warning(
                    "Exclusivity index %s rejected a checked write (attempt %d/%d); re-running checks",
                    error.details.get("constraint"),
                    attempt,
                    attempts,
                )
                continue
            logger.warning("Exclusivity index %s rejected a checked write; giving up", error.details.get("constraint"))
            raise translate(error) from error
    raise AssertionError("unreachable")
