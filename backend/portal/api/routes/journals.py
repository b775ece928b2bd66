"""Teaching Journal Routes — per-lesson journals.

Invariants:
    - Teachers act through their own teacher profile: create, update and delete
      are limited to journals on their own schedules
    - Admins may read, update and delete any journal
"""

from datetime import date

from fastapi import APIRouter, status

from portal.api.deps import AdminOrTeacher, DbSession, PageParams, TeacherUser
from portal.core.domain_types import Role
from portal.core.envelope import success
from portal.core.errors import ResourceNotFoundError
from portal.models import User
from portal.schemas.journal import JournalCreate, JournalUpdate
from portal.services import journal_service
from portal.services.teacher_service import teacher_for_user

router = APIRouter(prefix="/api/journals", tags=["journals"])


async def _own_teacher_id(db, user: User) -> int:
    teacher = await teacher_for_user(db, user.id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher profile")
    return teacher.id


async def _owner_scope(db, user: User) -> int | None:
    if user.role == Role.ADMIN.value:
        return None
    return await _own_teacher_id(db, user)


@router.get("/my-journals")
async def my_journals(
    user: TeacherUser,
    db: DbSession,
    pagination: PageParams,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
):
    journals, page = await journal_service.list_journals(
        db, pagination,
        teacher_id=await _own_teacher_id(db, user),
        date_from=date_from, date_to=date_to, search=search,
    )
    return success("Teaching journals retrieved successfully", journals, page.to_meta())


@router.get("/stats")
async def journal_stats(
    user: AdminOrTeacher, db: DbSession, teacher_id: int | None = None,
):
    scope = await _owner_scope(db, user)
    stats = await journal_service.journal_stats(db, teacher_id=scope or teacher_id)
    return success("Journal statistics retrieved successfully", stats)


@router.get("")
async def list_journals(
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    teacher_id: int | None = None,
    class_id: int | None = None,
    subject_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    sort_by: str = "teaching_date",
    sort_order: str = "desc",
):
    journals, page = await journal_service.list_journals(
        db, pagination, sort_by, sort_order,
        teacher_id=teacher_id, class_id=class_id, subject_id=subject_id,
        date_from=date_from, date_to=date_to, search=search,
    )
    return success("Teaching journals retrieved successfully", journals, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_journal(body: JournalCreate, user: TeacherUser, db: DbSession):
    journal = await journal_service.create_journal(db, body, await _own_teacher_id(db, user))
    return success("Teaching journal created successfully", journal)


@router.get("/teacher/{teacher_id}")
async def journals_by_teacher(
    teacher_id: int, _: AdminOrTeacher, db: DbSession, pagination: PageParams,
):
    journals, page = await journal_service.list_journals(db, pagination, teacher_id=teacher_id)
    return success("Teaching journals retrieved successfully", journals, page.to_meta())


@router.get("/class/{class_id}")
async def journals_by_class(
    class_id: int, _: AdminOrTeacher, db: DbSession, pagination: PageParams,
):
    journals, page = await journal_service.list_journals(db, pagination, class_id=class_id)
    return success("Teaching journals retrieved successfully", journals, page.to_meta())


@router.get("/subject/{subject_id}")
async def journals_by_subject(
    subject_id: int, _: AdminOrTeacher, db: DbSession, pagination: PageParams,
):
    journals, page = await journal_service.list_journals(db, pagination, subject_id=subject_id)
    return success("Teaching journals retrieved successfully", journals, page.to_meta())


@router.get("/{journal_id}")
async def get_journal(journal_id: int, _: AdminOrTeacher, db: DbSession):
    return success(
        "Teaching journal retrieved successfully", await journal_service.get_journal(db, journal_id),
    )


@router.put("/{journal_id}")
async def update_journal(journal_id: int, body: JournalUpdate, user: AdminOrTeacher, db: DbSession):
    journal = await journal_service.update_journal(
        db, journal_id, body.to_patch(), await _owner_scope(db, user),
    )
    return success("Teaching journal updated successfully", journal)


@router.delete("/{journal_id}")
async def delete_journal(journal_id: int, user: AdminOrTeacher, db: DbSession):
    await journal_service.delete_journal(db, journal_id, await _owner_scope(db, user))
    return success("Teaching journal deleted successfully")
