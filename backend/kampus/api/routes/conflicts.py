from fastapi import APIRouter, Depends, Query

from kampus.api.deps import get_ledger, get_placement_engine
from kampus.models.assignment import AssignmentStatus
from kampus.schemas.conflict import ConflictReport
from kampus.services.assignments import AssignmentLedger
from kampus.services.conflict_service import detect_conflicts
from kampus.services.placements import PlacementEngine

router = APIRouter()


@router.get("/conflicts/report", response_model=ConflictReport)
def conflict_report(
    academic_year_id: str | None = Query(default=None),
    ledger: AssignmentLedger = Depends(get_ledger),
    engine: PlacementEngine = Depends(get_placement_engine),
) -> ConflictReport:
    """Audit live schedule data; the write path should keep this empty."""
    assignments = ledger.list_assignments(academic_year_id=academic_year_id, status=AssignmentStatus.active)
    placements = engine.list_placements(academic_year_id=academic_year_id)
    return detect_conflicts(assignments, placements)
