"""Student Schemas — profile create/update and class assignment bodies."""

from pydantic import BaseModel, Field

from portal.core.domain_types import Gender, StudentStatus
from portal.schemas.common import EntityId, PatchModel, PhoneNumber


class StudentCreate(BaseModel):
    user_id: EntityId
    current_class_id: EntityId | None = None
    nis: str = Field(min_length=1, max_length=16)
    nisn: str | None = Field(None, min_length=10, max_length=10)
    full_name: str = Field(min_length=2, max_length=255)
    gender: Gender
    address: str | None = Field(None, max_length=1000)
    phone_number: PhoneNumber | None = None
    status: StudentStatus = StudentStatus.ACTIVE
    rfid_uid: str | None = Field(None, max_length=100)


class StudentUpdate(PatchModel):
    current_class_id: EntityId | None = None
    nis: str | None = Field(None, min_length=1, max_length=16)
    nisn: str | None = Field(None, min_length=10, max_length=10)
    full_name: str | None = Field(None, min_length=2, max_length=255)
    gender: Gender | None = None
    address: str | None = Field(None, max_length=1000)
    phone_number: PhoneNumber | None = None
    status: StudentStatus | None = None
    rfid_uid: str | None = Field(None, max_length=100)


class AssignClassRequest(BaseModel):
    class_id: EntityId
