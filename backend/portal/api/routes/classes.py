"""Class Routes — classes with homeroom teacher, counselor and roster.

Reads are open to admin, teacher and staff; writes to admin and staff; delete
is admin only.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from portal.api.deps import AdminUser, DbSession, PageParams, require_roles
from portal.core.domain_types import Role
from portal.core.envelope import success
from portal.models import User
from portal.schemas.school_class import AssignStudentRequest, ClassCreate, ClassUpdate
from portal.services import class_service

router = APIRouter(prefix="/api/classes", tags=["classes"])

Reader = Annotated[User, Depends(require_roles(Role.ADMIN, Role.TEACHER, Role.STAFF))]
Editor = Annotated[User, Depends(require_roles(Role.ADMIN, Role.STAFF))]


@router.get("/stats")
async def class_stats(_: Reader, db: DbSession):
    return success("Class statistics retrieved successfully", await class_service.class_stats(db))


@router.get("/available-teachers")
async def available_teachers(_: Editor, db: DbSession):
    return success(
        "Available teachers retrieved successfully", await class_service.available_teachers(db),
    )


@router.get("")
async def list_classes(
    _: Reader,
    db: DbSession,
    pagination: PageParams,
    search: str | None = None,
    grade_level: int | None = None,
    major: str | None = None,
    homeroom_teacher_id: int | None = None,
    has_homeroom_teacher: bool | None = None,
):
    classes, page = await class_service.list_classes(
        db, pagination, search, grade_level, major, homeroom_teacher_id, has_homeroom_teacher,
    )
    return success("Classes retrieved successfully", classes, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_class(body: ClassCreate, _: Editor, db: DbSession):
    return success("Class created successfully", await class_service.create_class(db, body))


@router.get("/{class_id}")
async def get_class(class_id: int, _: Reader, db: DbSession):
    return success("Class retrieved successfully", await class_service.get_class(db, class_id))


@router.put("/{class_id}")
async def update_class(class_id: int, body: ClassUpdate, _: Editor, db: DbSession):
    school_class = await class_service.update_class(db, class_id, body.to_patch())
    return success("Class updated successfully", school_class)


@router.delete("/{class_id}")
async def delete_class(class_id: int, _: AdminUser, db: DbSession):
    await class_service.delete_class(db, class_id)
    return success("Class deleted successfully")


@router.post("/{class_id}/assign-student")
async def assign_student(class_id: int, body: AssignStudentRequest, _: Editor, db: DbSession):
    student = await class_service.assign_student(db, class_id, body.student_id)
    return success("Student assigned to class successfully", student)


@router.post("/{class_id}/remove-student")
async def remove_student(class_id: int, body: AssignStudentRequest, _: Editor, db: DbSession):
    student = await class_service.remove_student(db, class_id, body.student_id)
    return success("Student removed from class successfully", student)
