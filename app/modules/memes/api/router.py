from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InvalidImage
from app.core.storage import UPLOAD_URL_PREFIX, image_storage
from app.deps import get_db, get_current_user
from app.modules.memes.schemas.meme import (
    MemeCreate, MemeListResponse, MemeUpdate, MemeUploadResponse, MemeWithCount,
    MessageResponse, NearbyMemeListResponse,
)
from app.modules.memes.services.feed import (
    get_meme_with_count, get_memes, get_trending_memes, get_user_memes,
)
from app.modules.memes.services.meme import create_meme, delete_meme, update_meme, validate_new_meme
from app.modules.memes.services.nearby import get_nearby_memes
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()

# Fixed paths are declared before /{meme_id} so they are not captured by it

@router.get("", response_model=MemeListResponse)
def read_memes(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Matches title or caption"),
    category: Optional[str] = Query(None),
    sort: Optional[str] = Query(None, description="'trending' orders by reactions"),
    limit: int = Query(settings.FEED_DEFAULT_LIMIT, ge=1),
) -> Any:
    """
    Retrieve memes with uploader and reaction counts.
    """
    memes = get_memes(db, search=search, category=category, sort=sort, limit=limit)
    return {"memes": memes, "count": len(memes)}

@router.get("/trending", response_model=MemeListResponse)
def read_trending_memes(
    db: Session = Depends(get_db),
    limit: int = Query(settings.TRENDING_DEFAULT_LIMIT, ge=1),
) -> Any:
    """
    Retrieve the most reacted memes.
    """
    memes = get_trending_memes(db, limit=limit)
    return {"memes": memes, "count": len(memes)}

@router.get("/nearby", response_model=NearbyMemeListResponse)
def read_nearby_memes(
    db: Session = Depends(get_db),
    radius: float = Query(settings.NEARBY_DEFAULT_RADIUS_KM, ge=0, description="Radius in km"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Retrieve memes uploaded within `radius` km of the caller's stored location.
    """
    memes = get_nearby_memes(db, current_user.id, radius_km=radius)
    return {"memes": memes, "count": len(memes)}

@router.get("/my-memes", response_model=MemeListResponse)
def read_my_memes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Retrieve the caller's own memes, newest first.
    """
    memes = get_user_memes(db, current_user.id)
    return {"memes": memes, "count": len(memes)}

@router.post("", response_model=MemeUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_meme(
    *,
    db: Session = Depends(get_db),
    title: str = Form(""),
    caption: str = Form(""),
    category: str = Form(""),
    image: Optional[UploadFile] = File(None),
    image_url: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Upload a meme from an image file or an external image URL.
    """
    # Field checks run before the image is written
    validate_new_meme(title, caption, category)

    saved_upload = image is not None and bool(image.filename)
    if saved_upload:
        image_url = await image_storage.save(image)
    elif not image_url:
        raise InvalidImage()
    elif image_url.startswith(UPLOAD_URL_PREFIX):
        raise InvalidImage("Image URL must point to an external image")

    meme_in = MemeCreate(title=title, caption=caption, category=category, image_url=image_url)
    try:
        meme = create_meme(db, meme_in, current_user.id)
    except Exception:
        if saved_upload:
            image_storage.delete(image_url)
        raise
    return {"message": "Meme uploaded successfully", "meme": meme}

@router.get("/{meme_id}", response_model=MemeWithCount)
def read_meme_by_id(
    *,
    db: Session = Depends(get_db),
    meme_id: int,
) -> Any:
    """
    Get a single meme with its reaction count.
    """
    return get_meme_with_count(db, meme_id)

@router.put("/{meme_id}", response_model=MessageResponse)
def update_meme_by_id(
    *,
    db: Session = Depends(get_db),
    meme_id: int,
    meme_in: MemeUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Update title, caption or category of one of the caller's memes.
    """
    update_meme(db, meme_id, current_user.id, meme_in)
    return {"message": "Meme updated successfully"}

@router.delete("/{meme_id}", response_model=MessageResponse)
def delete_meme_by_id(
    *,
    db: Session = Depends(get_db),
    meme_id: int,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Delete one of the caller's memes and all reactions on it.
    """
    deleted = delete_meme(db, meme_id, current_user.id)
    image_storage.delete(deleted.image_url)
    return {"message": "Meme deleted successfully"}
