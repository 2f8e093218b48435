import re
import logging
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import get_password_hash, verify_password
from app.db.session import translate_storage_errors
from app.modules.user_management.models.user import User
from app.modules.auth.schemas.auth import RegisterRequest

logger = logging.getLogger("app")

def sanitize_input(value: str) -> str:
    """Trim and drop angle brackets"""
    return re.sub(r"[<>]", "", value.strip())

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == email).first()

def username_or_email_taken(db: Session, username: str, email: str) -> bool:
    return (
        db.query(User.id)
        .filter(or_(User.email == email, User.username == username))
        .first()
        is not None
    )

@translate_storage_errors("Registration failed")
def register_user(db: Session, user_in: RegisterRequest) -> Optional[User]:
    """Create a user, or return None when the username or email is taken"""
    username = sanitize_input(user_in.username)
    email = sanitize_input(user_in.email).lower()

    if username_or_email_taken(db, username, email):
        return None

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(user_in.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.rollback()
        return None
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({username})")
    return user

@translate_storage_errors("Login failed")
def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email=sanitize_input(email).lower())
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
