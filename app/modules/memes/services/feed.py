from typing import List, Optional
import logging
from sqlalchemy import distinct, func, or_
from sqlalchemy.orm import Query, Session

from app.core.config import settings
from app.core.errors import MemeNotFound, ValidationError
from app.db.session import translate_storage_errors
from app.modules.memes.models.meme import Meme as MemeModel
from app.modules.memes.reactions.models.reaction import Reaction
from app.modules.memes.schemas.meme import Meme as MemeSchema, MemeWithCount
from app.modules.user_management.models.user import User as UserModel

logger = logging.getLogger("app")

SORT_TRENDING = "trending"
LIKE_ESCAPE = "\\"

# Distinct so a meme's count is never inflated by other joins
reaction_count = func.count(distinct(Reaction.id)).label("reaction_count")

def build_feed_query(db: Session, *extra_columns) -> Query:
    """One row per meme: (meme, uploader_username, reaction_count, *extra_columns)"""
    return (
        db.query(
            MemeModel,
            UserModel.username.label("uploader_username"),
            reaction_count,
            *extra_columns,
        )
        .outerjoin(UserModel, UserModel.id == MemeModel.uploader_id)
        .outerjoin(Reaction, Reaction.meme_id == MemeModel.id)
        .group_by(MemeModel.id, UserModel.id)
    )

def order_by_recency(query: Query) -> Query:
    # id breaks ties between rows created within the same clock tick
    return query.order_by(MemeModel.created_at.desc(), MemeModel.id.desc())

def order_by_trending(query: Query) -> Query:
    return query.order_by(reaction_count.desc(), MemeModel.created_at.desc(), MemeModel.id.desc())

def to_meme_with_count(row) -> MemeWithCount:
    """Transform a raw feed row into the response model"""
    meme_model, uploader_username, count = row[:3]
    return MemeWithCount(
        **MemeSchema.model_validate(meme_model).model_dump(),
        uploader_username=uploader_username,
        reaction_count=count or 0,
    )

def escape_like(term: str) -> str:
    """Make LIKE wildcards in a search term match literally"""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )

def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError("Limit must be a positive integer")

@translate_storage_errors("Failed to fetch memes")
def get_memes(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    limit: int = settings.FEED_DEFAULT_LIMIT,
) -> List[MemeWithCount]:
    """Get memes matching search and category, newest or most reacted first"""
    _check_limit(limit)
    logger.info(f"Getting memes with search={search!r}, category={category!r}, sort={sort!r}, limit={limit}")

    query = build_feed_query(db)

    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.filter(or_(
            MemeModel.title.ilike(pattern, escape=LIKE_ESCAPE),
            MemeModel.caption.ilike(pattern, escape=LIKE_ESCAPE),
        ))

    if category:
        query = query.filter(MemeModel.category == category)

    if sort == SORT_TRENDING:
        query = order_by_trending(query)
    else:
        query = order_by_recency(query)

    return [to_meme_with_count(row) for row in query.limit(limit).all()]

@translate_storage_errors("Failed to fetch trending memes")
def get_trending_memes(db: Session, limit: int = settings.TRENDING_DEFAULT_LIMIT) -> List[MemeWithCount]:
    """Get the most reacted memes regardless of any requested sort"""
    _check_limit(limit)
    logger.info(f"Getting trending memes with limit={limit}")
    query = order_by_trending(build_feed_query(db))
    return [to_meme_with_count(row) for row in query.limit(limit).all()]

@translate_storage_errors("Failed to fetch your memes")
def get_user_memes(db: Session, user_id: int) -> List[MemeWithCount]:
    """Get memes uploaded by one user, newest first"""
    logger.info(f"Getting memes for uploader {user_id}")
    query = order_by_recency(build_feed_query(db).filter(MemeModel.uploader_id == user_id))
    return [to_meme_with_count(row) for row in query.all()]

@translate_storage_errors("Failed to fetch meme")
def get_meme_with_count(db: Session, meme_id: int) -> MemeWithCount:
    row = build_feed_query(db).filter(MemeModel.id == meme_id).first()
    if row is None:
        raise MemeNotFound()
    return to_meme_with_count(row)
