"""Subject Routes — subject catalogue."""

from fastapi import APIRouter, status

from portal.api.deps import AdminOrTeacher, AdminUser, DbSession, PageParams
from portal.core.envelope import success
from portal.schemas.subject import SubjectCreate, SubjectUpdate
from portal.services import subject_service

router = APIRouter(prefix="/api/subjects", tags=["subjects"])


@router.get("/stats")
async def subject_stats(_: AdminOrTeacher, db: DbSession):
    return success(
        "Subject statistics retrieved successfully", await subject_service.subject_stats(db),
    )


@router.get("")
async def list_subjects(
    _: AdminOrTeacher, db: DbSession, pagination: PageParams, search: str | None = None,
):
    subjects, page = await subject_service.list_subjects(db, pagination, search)
    return success("Subjects retrieved successfully", subjects, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subject(body: SubjectCreate, _: AdminUser, db: DbSession):
    return success("Subject created successfully", await subject_service.create_subject(db, body))


@router.get("/{subject_id}")
async def get_subject(subject_id: int, _: AdminOrTeacher, db: DbSession):
    return success("Subject retrieved successfully", await subject_service.get_subject(db, subject_id))


@router.put("/{subject_id}")
async def update_subject(subject_id: int, body: SubjectUpdate, _: AdminUser, db: DbSession):
    subject = await subject_service.update_subject(db, subject_id, body.to_patch())
    return success("Subject updated successfully", subject)


@router.delete("/{subject_id}")
async def delete_subject(subject_id: int, _: AdminUser, db: DbSession):
    await subject_service.delete_subject(db, subject_id)
    return success("Subject deleted successfully")
