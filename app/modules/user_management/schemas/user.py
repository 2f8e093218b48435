from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr

class UserBase(BaseModel):
    username: str
    email: EmailStr

class User(UserBase):
    """User model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    location_lat: Optional[float] = None
    location_long: Optional[float] = None
    created_at: Optional[datetime] = None

class LocationUpdate(BaseModel):
    latitude: float
    longitude: float

class LocationResponse(BaseModel):
    message: str
    location: LocationUpdate

class UserResponse(BaseModel):
    user: User
