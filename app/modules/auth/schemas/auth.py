from pydantic import BaseModel, EmailStr, Field, field_validator

from app.modules.user_management.schemas.user import User

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.strip().lower() if isinstance(v, str) else v

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

class AuthResponse(Token):
    message: str
    user: User
