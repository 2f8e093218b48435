from typing import List
import logging
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import LocationNotSet, UserNotFound, ValidationError
from app.core.geo import haversine_distance
from app.db.session import translate_storage_errors
from app.modules.memes.schemas.meme import NearbyMeme
from app.modules.memes.services.feed import build_feed_query, order_by_recency, to_meme_with_count
from app.modules.user_management.models.user import User as UserModel
from app.modules.user_management.services.user import get_user

logger = logging.getLogger("app")

@translate_storage_errors("Failed to fetch nearby memes")
def get_nearby_memes(
    db: Session,
    user_id: int,
    radius_km: float = settings.NEARBY_DEFAULT_RADIUS_KM,
) -> List[NearbyMeme]:
    """Get memes whose uploader is within radius_km of the user's stored location.

    Every located meme is fetched and measured here; there is no spatial
    index, so cost grows with the catalog.
    """
    if radius_km < 0:
        raise ValidationError("Radius must not be negative")

    viewer = get_user(db, user_id)
    if viewer is None:
        raise UserNotFound()
    if not viewer.has_location:
        raise LocationNotSet()

    rows = order_by_recency(
        build_feed_query(db, UserModel.location_lat, UserModel.location_long).filter(
            UserModel.location_lat.isnot(None),
            UserModel.location_long.isnot(None),
        )
    ).all()

    nearby = []
    for row in rows:
        uploader_lat, uploader_long = row[3], row[4]
        distance = haversine_distance(viewer.location_lat, viewer.location_long, uploader_lat, uploader_long)
        if distance <= radius_km:
            nearby.append(NearbyMeme(**to_meme_with_count(row).model_dump(), distance_km=distance))

    logger.info(f"Found {len(nearby)} of {len(rows)} located memes within {radius_km} km of user {user_id}")
    return nearby
