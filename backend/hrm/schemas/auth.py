from pydantic import BaseModel, EmailStr, field_validator
import uuid


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Passwort muss mindestens 8 Zeichen lang sein")
        return v


class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    department: str | None
    role: str
    is_active: bool

    model_config = {"from_attributes": True}
