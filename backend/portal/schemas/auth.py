"""Auth Schemas — login, refresh and password change bodies."""

from pydantic import AliasChoices, BaseModel, Field, model_validator


class LoginRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(
        min_length=1, validation_alias=AliasChoices("refreshToken", "refresh_token"),
    )


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(
        min_length=1, validation_alias=AliasChoices("currentPassword", "current_password"),
    )
    new_password: str = Field(
        min_length=6, validation_alias=AliasChoices("newPassword", "new_password"),
    )
    confirm_password: str = Field(
        validation_alias=AliasChoices("confirmPassword", "confirm_password"),
    )

    @model_validator(mode="after")
    def check_confirmation(self) -> "ChangePasswordRequest":
        if self.confirm_password != self.new_password:
            raise ValueError("Confirm password must match new password")
        return self
