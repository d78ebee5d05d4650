from pydantic import BaseModel, EmailStr, Field

from app.schemas.user import NewPassword

class ForgotPasswordIn(BaseModel):
    email: EmailStr

class ResetPasswordIn(BaseModel):
    token: str = Field(..., min_length=1)
    password: NewPassword

class VerifyTokenOut(BaseModel):
    valid: bool
    email: str
