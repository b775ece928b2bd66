"""Shared schema pieces — id and phone fields, patch extraction.

Design Decisions:
    - Ids accepted as JSON numbers or digit strings (pydantic lax int coercion)
    - Update schemas are partial: only fields the client sent are applied
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

EntityId = Annotated[int, Field(gt=0)]
PHONE_PATTERN = r"^(\+62|62|0)8[1-9][0-9]{6,9}$"
PhoneNumber = Annotated[str, Field(pattern=PHONE_PATTERN)]


class PatchModel(BaseModel):
    """Base for partial-update bodies."""
    model_config = ConfigDict(extra="ignore")

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True, mode="python")
