from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from app.models.user import UserRole, UserStatus
from app.utils.hashing import fits_bcrypt, BCRYPT_MAX_BYTES


def check_password_bytes(v: str) -> str:
    if not fits_bcrypt(v):
        raise ValueError(f"Password too long (max {BCRYPT_MAX_BYTES} bytes)")
    return v

NewPassword = Annotated[str, Field(min_length=8), AfterValidator(check_password_bytes)]


class UserCreate(BaseModel):
    email: EmailStr
    password: NewPassword
    name: str = Field(..., min_length=3, max_length=100)

class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    status: UserStatus
    model_config = ConfigDict(from_attributes=True)

class UserEnvelope(BaseModel):
    detail: str
    user: UserOut

class MeOut(BaseModel):
    user: UserOut
