"""Authentication router: registration, login and the caller's own profile"""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from app.deps import get_db, get_current_user
from app.modules.auth.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.modules.auth.services.auth import authenticate, register_user
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import (
    LocationResponse, LocationUpdate, UserResponse,
)
from app.modules.user_management.services.user import update_location

router = APIRouter()

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    user_in: RegisterRequest,
) -> Any:
    """Register a new user and return an access token"""
    user = register_user(db, user_in)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already exists",
        )

    return {
        "message": "User registered successfully",
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user": user,
    }

@router.post("/login", response_model=AuthResponse)
def login(
    *,
    db: Session = Depends(get_db),
    credentials: LoginRequest,
) -> Any:
    """Exchange email and password for an access token"""
    user = authenticate(db, credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "message": "Login successful",
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user": user,
    }

@router.put("/location", response_model=LocationResponse)
def set_location(
    *,
    db: Session = Depends(get_db),
    location_in: LocationUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Store the caller's coordinates for the nearby feed"""
    update_location(db, current_user.id, location_in.latitude, location_in.longitude)
    return {"message": "Location updated successfully", "location": location_in}

@router.get("/me", response_model=UserResponse)
def read_user_me(
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get current user"""
    return {"user": current_user}
