from typing import Optional
import logging
from sqlalchemy.orm import Session

from app.core.errors import (
    CaptionTooLong, InvalidCategory, InvalidImage, MissingField,
    NoFieldsToUpdate, NotFoundOrUnauthorized, ValidationError,
)
from app.db.session import translate_storage_errors
from app.modules.memes.models.meme import Meme, MEME_CATEGORIES, MAX_CAPTION_LENGTH
from app.modules.memes.reactions.models.reaction import Reaction
from app.modules.memes.schemas.meme import Meme as MemeSchema, MemeCreate, MemeUpdate

logger = logging.getLogger("app")

def validate_caption(caption: Optional[str]) -> None:
    if caption is not None and len(caption) > MAX_CAPTION_LENGTH:
        raise CaptionTooLong()

def validate_category(category: Optional[str]) -> None:
    if category is not None and category not in MEME_CATEGORIES:
        raise InvalidCategory()

def validate_new_meme(title: Optional[str], caption: Optional[str], category: Optional[str]) -> None:
    """Checks shared by the upload route and create_meme"""
    if not title or not title.strip() or not caption or not caption.strip():
        raise MissingField()
    validate_caption(caption)
    if category not in MEME_CATEGORIES:
        raise InvalidCategory()

@translate_storage_errors("Failed to upload meme")
def create_meme(db: Session, meme_in: MemeCreate, uploader_id: int) -> Meme:
    """Create new meme"""
    validate_new_meme(meme_in.title, meme_in.caption, meme_in.category)
    if not meme_in.image_url:
        raise InvalidImage()

    logger.info(f"Creating meme for uploader ID: {uploader_id}")
    meme = Meme(
        title=meme_in.title.strip(),
        caption=meme_in.caption.strip(),
        image_url=meme_in.image_url,
        category=meme_in.category,
        uploader_id=uploader_id,
    )
    db.add(meme)
    db.commit()
    db.refresh(meme)
    return meme

def get_owned_meme(db: Session, meme_id: int, user_id: int) -> Meme:
    """Load a meme only if user_id uploaded it, locking the row until commit.

    Missing and foreign memes are reported the same way.
    """
    meme = (
        db.query(Meme)
        .filter(Meme.id == meme_id, Meme.uploader_id == user_id)
        .with_for_update()
        .first()
    )
    if meme is None:
        raise NotFoundOrUnauthorized("Meme not found or unauthorized")
    return meme

@translate_storage_errors("Failed to update meme")
def update_meme(db: Session, meme_id: int, user_id: int, meme_in: MemeUpdate) -> Meme:
    """Partially update title, caption and category of the user's own meme"""
    meme = get_owned_meme(db, meme_id, user_id)

    # Empty and whitespace-only values count as not supplied
    update_data = {
        field: value
        for field, value in meme_in.model_dump(exclude_unset=True).items()
        if value and value.strip()
    }
    try:
        validate_caption(update_data.get("caption"))
        validate_category(update_data.get("category"))
        if not update_data:
            raise NoFieldsToUpdate()
    except ValidationError:
        db.rollback()
        raise

    logger.info(f"Updating meme {meme_id} fields {sorted(update_data)}")
    for field, value in update_data.items():
        setattr(meme, field, value.strip() if field in ("title", "caption") else value)

    db.commit()
    db.refresh(meme)
    return meme

@translate_storage_errors("Failed to delete meme")
def delete_meme(db: Session, meme_id: int, user_id: int) -> MemeSchema:
    """
    Delete the user's own meme together with every reaction on it
    """
    meme = get_owned_meme(db, meme_id, user_id)
    deleted = MemeSchema.model_validate(meme)

    logger.info(f"Deleting meme with ID: {meme_id}")
    # Reactions go in the same transaction as the meme
    db.query(Reaction).filter(Reaction.meme_id == meme_id).delete(synchronize_session=False)
    db.delete(meme)
    db.commit()
    return deleted
