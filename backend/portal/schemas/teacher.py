"""Teacher Schemas — profile create/update and signature path bodies.

Invariants:
    - nip is exactly 18 chars, nik exactly 16 (both optional/nullable)
    - employment_status is one of ASN/GTT/PTT/Tetap
"""

from pydantic import BaseModel, Field

from portal.core.domain_types import EmploymentStatus
from portal.schemas.common import EntityId, PatchModel, PhoneNumber


class TeacherCreate(BaseModel):
    user_id: EntityId
    nip: str | None = Field(None, min_length=18, max_length=18)
    nik: str | None = Field(None, min_length=16, max_length=16)
    full_name: str = Field(min_length=2, max_length=255)
    phone_number: PhoneNumber | None = None
    employment_status: EmploymentStatus


class TeacherUpdate(PatchModel):
    nip: str | None = Field(None, min_length=18, max_length=18)
    nik: str | None = Field(None, min_length=16, max_length=16)
    full_name: str | None = Field(None, min_length=2, max_length=255)
    phone_number: PhoneNumber | None = None
    employment_status: EmploymentStatus | None = None


class SignatureUpdate(BaseModel):
    signature_image_path: str = Field(min_length=1, max_length=255)
