from fastapi import APIRouter, Depends, Query, Response, status

from kampus.api.deps import get_placement_engine
from kampus.models.assignment import DayOfWeek
from kampus.schemas.placement import PlacementCreate, PlacementMove, PlacementOut
from kampus.services.placements import PlacementEngine

router = APIRouter()


@router.get("/placements", response_model=list[PlacementOut])
def list_placements(
    assignment_id: str | None = Query(default=None),
    classroom_id: str | None = Query(default=None),
    academic_year_id: str | None = Query(default=None),
    day_of_week: DayOfWeek | None = Query(default=None),
    engine: PlacementEngine = Depends(get_placement_engine),
) -> list[PlacementOut]:
    return engine.list_placements(
        assignment_id=assignment_id,
        classroom_id=classroom_id,
        academic_year_id=academic_year_id,
        day_of_week=day_of_week,
    )


@router.post("/placements", response_model=PlacementOut, status_code=status.HTTP_201_CREATED)
def create_placement(
    payload: PlacementCreate,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> PlacementOut:
    return engine.create_placement(**payload.model_dump())


@router.get("/placements/{placement_id}", response_model=PlacementOut)
def get_placement(placement_id: str, engine: PlacementEngine = Depends(get_placement_engine)) -> PlacementOut:
    return engine.get(placement_id)


@router.patch("/placements/{placement_id}", response_model=PlacementOut)
def move_placement(
    placement_id: str,
    payload: PlacementMove,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> PlacementOut:
    return engine.move_placement(placement_id, payload.classroom_id)


@router.delete("/placements/{placement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_placement(placement_id: str, engine: PlacementEngine = Depends(get_placement_engine)) -> Response:
    removed = engine.delete_placement(placement_id)
    # Repeated deletes succeed; the header tells the caller nothing changed.
    headers = {} if removed else {"X-Already-Removed": "true"}
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


@router.get("/classrooms/{classroom_id}/timetable", response_model=list[PlacementOut])
def classroom_timetable(
    classroom_id: str,
    academic_year_id: str | None = Query(default=None),
    engine: PlacementEngine = Depends(get_placement_engine),
) -> list[PlacementOut]:
    return engine.classroom_timetable(classroom_id, academic_year_id=academic_year_id)
