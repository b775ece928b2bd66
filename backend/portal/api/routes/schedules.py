"""Schedule Routes — weekly timetable with conflict checking.

Invariants:
    - Create and update run the teacher/class/room conflict check in the same
      transaction as the write (409 SCHEDULE_CONFLICT on overlap)
    - check-conflicts is a dry run: 200 when free, 409 with the same error otherwise
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from portal.api.deps import AdminOrTeacher, AdminUser, DbSession, PageParams, require_roles
from portal.core.domain_types import DayOfWeek, Role
from portal.core.envelope import success
from portal.core.schedule_conflicts import ScheduleSlot
from portal.models import User
from portal.schemas.schedule import ConflictCheckRequest, ScheduleCreate, ScheduleUpdate
from portal.services import schedule_service

router = APIRouter(prefix="/api/schedules", tags=["schedules"])

AnyMember = Annotated[User, Depends(require_roles(Role.ADMIN, Role.TEACHER, Role.STUDENT))]


@router.get("/stats")
async def schedule_stats(_: AdminUser, db: DbSession):
    return success(
        "Schedule statistics retrieved successfully", await schedule_service.schedule_stats(db),
    )


@router.get("/weekly")
async def weekly_schedule(
    _: AnyMember, db: DbSession, class_id: int | None = None, teacher_id: int | None = None,
):
    week = await schedule_service.weekly_schedule(db, class_id, teacher_id)
    return success("Weekly schedule retrieved successfully", week)


@router.post("/check-conflicts")
async def check_conflicts(
    body: ConflictCheckRequest,
    _: AdminOrTeacher,
    db: DbSession,
    exclude_id: Annotated[int | None, Query(gt=0)] = None,
):
    await schedule_service.preview_conflicts(
        db,
        ScheduleSlot(
            class_id=body.class_id,
            teacher_id=body.teacher_id,
            day_of_week=body.day_of_week,
            start_time=body.start_time,
            end_time=body.end_time,
            room=body.room,
        ),
        exclude_id,
    )
    return success("No schedule conflicts found", {"has_conflict": False})


@router.get("/class/{class_id}")
async def schedules_by_class(class_id: int, _: AdminOrTeacher, db: DbSession):
    return success(
        "Class schedules retrieved successfully",
        await schedule_service.schedules_by_class(db, class_id),
    )


@router.get("/teacher/{teacher_id}")
async def schedules_by_teacher(teacher_id: int, _: AdminOrTeacher, db: DbSession):
    return success(
        "Teacher schedules retrieved successfully",
        await schedule_service.schedules_by_teacher(db, teacher_id),
    )


@router.get("")
async def list_schedules(
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    class_id: int | None = None,
    teacher_id: int | None = None,
    subject_id: int | None = None,
    day_of_week: DayOfWeek | None = None,
    room: str | None = None,
    sort_by: str = "day_of_week",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "asc",
):
    schedules, page = await schedule_service.list_schedules(
        db, pagination, class_id, teacher_id, subject_id, day_of_week, room, sort_by, sort_order,
    )
    return success("Schedules retrieved successfully", schedules, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_schedule(body: ScheduleCreate, _: AdminUser, db: DbSession):
    return success("Schedule created successfully", await schedule_service.create_schedule(db, body))


@router.get("/{schedule_id}")
async def get_schedule(schedule_id: int, _: AdminOrTeacher, db: DbSession):
    return success(
        "Schedule retrieved successfully", await schedule_service.get_schedule(db, schedule_id),
    )


@router.put("/{schedule_id}")
async def update_schedule(schedule_id: int, body: ScheduleUpdate, _: AdminUser, db: DbSession):
    schedule = await schedule_service.update_schedule(db, schedule_id, body.to_patch())
    return success("Schedule updated successfully", schedule)


@router.delete("/{schedule_id}")
async def delete_schedule(schedule_id: int, _: AdminUser, db: DbSession):
    await schedule_service.delete_schedule(db, schedule_id)
    return success("Schedule deleted successfully")
