"""Schedule API: owner edits to an order's weekly pattern, breaks and exclusions."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from marketbook.api.dependencies import get_schedule_service
from marketbook.api.schemas.schedule import (
    ApplyDefaultsRequest,
    BreakCreate,
    BreakCreated,
    BreakExclusionIn,
    BreakExclusionOut,
    BreakOverlapOut,
    BreakUpdate,
    DayScheduleSchema,
    WeeklyPatternSchema,
)
from marketbook.infra.database.models.break_exclusion import BreakExclusion
from marketbook.scheduling.times import TimeRange, format_time
from marketbook.services import ScheduleService

router = APIRouter(prefix="/orders", tags=["schedule"])


def _exclusion_out(e: BreakExclusion) -> BreakExclusionOut:
    return BreakExclusionOut(id=e.id, date=e.date, start=format_time(e.start_time), end=format_time(e.end_time))


@router.get("/{order_id}/weekly-pattern", response_model=WeeklyPatternSchema)
async def get_weekly_pattern(order_id: int, service: ScheduleService = Depends(get_schedule_service)):
    return (await service.get_pattern(order_id)).to_dict()


@router.put("/{order_id}/weekly-pattern", response_model=WeeklyPatternSchema)
async def replace_weekly_pattern(
    order_id: int,
    body: WeeklyPatternSchema,
    service: ScheduleService = Depends(get_schedule_service),
):
    pattern = await service.replace_pattern(order_id, body.model_dump(by_alias=True))
    return pattern.to_dict()


@router.put("/{order_id}/weekly-pattern/days/{day}", response_model=WeeklyPatternSchema)
async def set_day(
    order_id: int,
    day: str,
    body: DayScheduleSchema,
    service: ScheduleService = Depends(get_schedule_service),
):
    pattern = await service.set_day(order_id, day, body.model_dump(by_alias=True))
    return pattern.to_dict()


@router.post("/{order_id}/weekly-pattern/apply-defaults", response_model=WeeklyPatternSchema)
async def apply_defaults(
    order_id: int,
    body: ApplyDefaultsRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Monday to Friday open with the given (or configured) hours, weekend closed."""
    return (await service.apply_defaults(order_id, body.start, body.end)).to_dict()


@router.post(
    "/{order_id}/weekly-pattern/days/{day}/breaks",
    response_model=BreakCreated,
    status_code=status.HTTP_201_CREATED,
)
async def add_break(
    order_id: int,
    day: str,
    body: BreakCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    pattern, placed = await service.add_break(order_id, day, body.start, body.end)
    return {"pattern": pattern.to_dict(), "break": placed.to_dict()}


@router.patch("/{order_id}/weekly-pattern/days/{day}/breaks/{index}", response_model=WeeklyPatternSchema)
async def update_break(
    order_id: int,
    day: str,
    index: int,
    body: BreakUpdate,
    service: ScheduleService = Depends(get_schedule_service),
):
    return (await service.update_break(order_id, day, index, body.field, body.time)).to_dict()


@router.delete("/{order_id}/weekly-pattern/days/{day}/breaks/{index}", response_model=WeeklyPatternSchema)
async def delete_break(
    order_id: int,
    day: str,
    index: int,
    service: ScheduleService = Depends(get_schedule_service),
):
    return (await service.delete_break(order_id, day, index)).to_dict()


@router.get("/{order_id}/break-overlaps", response_model=List[BreakOverlapOut])
async def list_break_overlaps(order_id: int, service: ScheduleService = Depends(get_schedule_service)):
    """Bookings that run into a break; shown to the owner before saving breaks."""
    return [o.to_dict() for o in await service.break_overlaps(order_id)]


@router.post("/{order_id}/break-exclusions/prioritize", response_model=List[BreakExclusionOut])
async def prioritize_bookings(order_id: int, service: ScheduleService = Depends(get_schedule_service)):
    return [_exclusion_out(e) for e in await service.prioritize_bookings(order_id)]


@router.get("/{order_id}/break-exclusions", response_model=List[BreakExclusionOut])
async def list_break_exclusions(order_id: int, service: ScheduleService = Depends(get_schedule_service)):
    return [_exclusion_out(e) for e in await service.list_exclusions(order_id)]


@router.post(
    "/{order_id}/break-exclusions",
    response_model=BreakExclusionOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_break_exclusion(
    order_id: int,
    body: BreakExclusionIn,
    service: ScheduleService = Depends(get_schedule_service),
):
    created = await service.add_exclusion(order_id, body.date, TimeRange.of(body.start, body.end))
    return _exclusion_out(created)


@router.delete("/{order_id}/break-exclusions", status_code=status.HTTP_204_NO_CONTENT)
async def delete_break_exclusion(
    order_id: int,
    body: BreakExclusionIn,
    service: ScheduleService = Depends(get_schedule_service),
):
    await service.delete_exclusion(order_id, body.date, TimeRange.of(body.start, body.end))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
