"""Teacher Routes — teacher profiles; reads for admin and teachers, writes admin only."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from portal.api.deps import AdminOrTeacher, AdminUser, DbSession, PageParams
from portal.core.domain_types import EmploymentStatus
from portal.core.envelope import success
from portal.schemas.teacher import SignatureUpdate, TeacherCreate, TeacherUpdate
from portal.services import teacher_service

router = APIRouter(prefix="/api/teachers", tags=["teachers"])


@router.get("/stats")
async def teacher_stats(_: AdminOrTeacher, db: DbSession):
    return success(
        "Teacher statistics retrieved successfully", await teacher_service.teacher_stats(db),
    )


@router.get("/available-users")
async def available_users(_: AdminUser, db: DbSession):
    return success(
        "Available users retrieved successfully", await teacher_service.available_users(db),
    )


@router.get("/search")
async def search_teachers(
    _: AdminOrTeacher, db: DbSession, q: Annotated[str, Query(min_length=2)],
):
    return success(
        "Teachers search completed successfully", await teacher_service.search_teachers(db, q),
    )


@router.get("")
async def list_teachers(
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    search: str | None = None,
    employment_status: EmploymentStatus | None = None,
):
    teachers, page = await teacher_service.list_teachers(db, pagination, search, employment_status)
    return success("Teachers retrieved successfully", teachers, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_teacher(body: TeacherCreate, _: AdminUser, db: DbSession):
    return success("Teacher created successfully", await teacher_service.create_teacher(db, body))


@router.get("/{teacher_id}")
async def get_teacher(teacher_id: int, _: AdminOrTeacher, db: DbSession):
    return success("Teacher retrieved successfully", await teacher_service.get_teacher(db, teacher_id))


@router.put("/{teacher_id}")
async def update_teacher(teacher_id: int, body: TeacherUpdate, _: AdminUser, db: DbSession):
    teacher = await teacher_service.update_teacher(db, teacher_id, body.to_patch())
    return success("Teacher updated successfully", teacher)


@router.delete("/{teacher_id}")
async def delete_teacher(teacher_id: int, _: AdminUser, db: DbSession):
    await teacher_service.delete_teacher(db, teacher_id)
    return success("Teacher deleted successfully")


@router.post("/{teacher_id}/signature")
async def upload_signature(teacher_id: int, body: SignatureUpdate, _: AdminUser, db: DbSession):
    teacher = await teacher_service.set_signature(db, teacher_id, body.signature_image_path)
    return success("Signature updated successfully", teacher)
