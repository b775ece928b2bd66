"""Student Routes — student profiles and class placement."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from portal.api.deps import AdminOrTeacher, AdminUser, DbSession, PageParams
from portal.core.domain_types import Gender, StudentStatus
from portal.core.envelope import success
from portal.schemas.student import AssignClassRequest, StudentCreate, StudentUpdate
from portal.services import student_service

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("/stats")
async def student_stats(_: AdminOrTeacher, db: DbSession):
    return success(
        "Student statistics retrieved successfully", await student_service.student_stats(db),
    )


@router.get("/available-users")
async def available_users(_: AdminUser, db: DbSession):
    return success(
        "Available users retrieved successfully", await student_service.available_users(db),
    )


@router.get("/search")
async def search_students(
    _: AdminOrTeacher, db: DbSession, q: Annotated[str, Query(min_length=2)],
):
    return success(
        "Students search completed successfully", await student_service.search_students(db, q),
    )


@router.get("/class/{class_id}")
async def students_by_class(class_id: int, _: AdminOrTeacher, db: DbSession):
    return success(
        "Students retrieved successfully", await student_service.students_by_class(db, class_id),
    )


@router.get("")
async def list_students(
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    search: str | None = None,
    status: StudentStatus | None = None,
    class_id: int | None = None,
    gender: Gender | None = None,
):
    students, page = await student_service.list_students(
        db, pagination, search, status, class_id, gender,
    )
    return success("Students retrieved successfully", students, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(body: StudentCreate, _: AdminUser, db: DbSession):
    return success("Student created successfully", await student_service.create_student(db, body))


@router.get("/{student_id}")
async def get_student(student_id: int, _: AdminOrTeacher, db: DbSession):
    return success("Student retrieved successfully", await student_service.get_student(db, student_id))


@router.put("/{student_id}")
async def update_student(student_id: int, body: StudentUpdate, _: AdminUser, db: DbSession):
    student = await student_service.update_student(db, student_id, body.to_patch())
    return success("Student updated successfully", student)


@router.delete("/{student_id}")
async def delete_student(student_id: int, _: AdminUser, db: DbSession):
    await student_service.delete_student(db, student_id)
    return success("Student deleted successfully")


@router.post("/{student_id}/assign-class")
async def assign_class(student_id: int, body: AssignClassRequest, _: AdminUser, db: DbSession):
    student = await student_service.assign_to_class(db, student_id, body.class_id)
    return success("Student assigned to class successfully", student)


@router.delete("/{student_id}/remove-class")
async def remove_class(student_id: int, _: AdminUser, db: DbSession):
    student = await student_service.remove_from_class(db, student_id)
    return success("Student removed from class successfully", student)
