from typing import Optional
import logging
from sqlalchemy.orm import Session

from app.core.errors import InvalidCoordinates, UserNotFound
from app.db.session import translate_storage_errors
from app.modules.user_management.models.user import User

logger = logging.getLogger("app")

def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def validate_coordinates(latitude: float, longitude: float) -> None:
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise InvalidCoordinates()

@translate_storage_errors("Failed to update location")
def update_location(db: Session, user_id: int, latitude: float, longitude: float) -> User:
    """Store both coordinates for the user in one write"""
    validate_coordinates(latitude, longitude)

    updated = (
        db.query(User)
        .filter(User.id == user_id)
        .update(
            {User.location_lat: latitude, User.location_long: longitude},
            synchronize_session=False,
        )
    )
    if not updated:
        db.rollback()
        raise UserNotFound()

    db.commit()
    logger.info(f"Updated location for user {user_id}")
    return get_user(db, user_id)
