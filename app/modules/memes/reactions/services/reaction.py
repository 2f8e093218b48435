from dataclasses import dataclass
from typing import List, Tuple
import logging
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import InvalidReactionType, MemeNotFound, NotFoundOrUnauthorized, StorageFault
from app.db.session import translate_storage_errors
from app.modules.memes.models.meme import Meme
from app.modules.memes.reactions.models.reaction import Reaction, REACTION_TYPES
from app.modules.memes.reactions.schemas.reaction import (
    Reaction as ReactionSchema, ReactionCounts, ReactionWithUser,
)
from app.modules.user_management.models.user import User

logger = logging.getLogger("app")

STATUS_CREATED = "created"
STATUS_UPDATED = "updated"

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

@dataclass
class ReactionResult:
    status: str
    reaction: ReactionSchema

    @property
    def created(self) -> bool:
        return self.status == STATUS_CREATED

def validate_reaction_type(reaction_type: str) -> None:
    if reaction_type not in REACTION_TYPES:
        raise InvalidReactionType()

def _insert_for(db: Session):
    """INSERT construct with ON CONFLICT support for the bound database"""
    dialect = db.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect]
    except KeyError:
        raise StorageFault(f"Reactions are not supported on {dialect}") from None

def _find_reaction(db: Session, meme_id: int, user_id: int) -> Reaction:
    return (
        db.query(Reaction)
        .filter(Reaction.meme_id == meme_id, Reaction.user_id == user_id)
        .populate_existing()
        .one()
    )

@translate_storage_errors("Failed to add reaction")
def upsert_reaction(db: Session, meme_id: int, user_id: int, reaction_type: str) -> ReactionResult:
    """Create the user's reaction to a meme, or change its type if one exists.

    The insert is guarded by the (meme_id, user_id) unique constraint, so
    concurrent calls for the same pair end up with a single row.
    """
    validate_reaction_type(reaction_type)

    if db.query(Meme.id).filter(Meme.id == meme_id).first() is None:
        raise MemeNotFound()

    insert = _insert_for(db)
    stmt = (
        insert(Reaction)
        .values(meme_id=meme_id, user_id=user_id, reaction_type=reaction_type)
        .on_conflict_do_nothing(index_elements=["meme_id", "user_id"])
        .returning(Reaction.id)
    )
    try:
        new_id = db.execute(stmt).scalar_one_or_none()
    except IntegrityError:
        # The meme was deleted after the existence check
        db.rollback()
        raise MemeNotFound()

    if new_id is not None:
        reaction = ReactionSchema.model_validate(db.get(Reaction, new_id))
        db.commit()
        logger.info(f"User {user_id} reacted {reaction_type} to meme {meme_id}")
        return ReactionResult(status=STATUS_CREATED, reaction=reaction)

    updated = (
        db.query(Reaction)
        .filter(Reaction.meme_id == meme_id, Reaction.user_id == user_id)
        .update({Reaction.reaction_type: reaction_type}, synchronize_session=False)
    )
    if not updated:
        # Conflicting row vanished with its meme in between the two statements
        db.rollback()
        raise MemeNotFound()

    reaction = ReactionSchema.model_validate(_find_reaction(db, meme_id, user_id))
    db.commit()
    logger.info(f"User {user_id} changed reaction on meme {meme_id} to {reaction_type}")
    return ReactionResult(status=STATUS_UPDATED, reaction=reaction)

@translate_storage_errors("Failed to update reaction")
def update_reaction(db: Session, reaction_id: int, user_id: int, reaction_type: str) -> ReactionSchema:
    """Change the type of a reaction the user owns"""
    validate_reaction_type(reaction_type)

    updated = (
        db.query(Reaction)
        .filter(Reaction.id == reaction_id, Reaction.user_id == user_id)
        .update({Reaction.reaction_type: reaction_type}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise NotFoundOrUnauthorized("Reaction not found or unauthorized")

    reaction = ReactionSchema.model_validate(db.get(Reaction, reaction_id, populate_existing=True))
    db.commit()
    return reaction

@translate_storage_errors("Failed to delete reaction")
def delete_reaction(db: Session, reaction_id: int, user_id: int) -> None:
    """Delete a reaction the user owns"""
    deleted = (
        db.query(Reaction)
        .filter(Reaction.id == reaction_id, Reaction.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise NotFoundOrUnauthorized("Reaction not found or unauthorized")

    db.commit()
    logger.info(f"User {user_id} deleted reaction {reaction_id}")

def tally_reactions(reactions: List[ReactionWithUser]) -> ReactionCounts:
    """Count by type over exactly the reactions being returned"""
    counts = {reaction_type: 0 for reaction_type in REACTION_TYPES}
    for reaction in reactions:
        if reaction.reaction_type in counts:
            counts[reaction.reaction_type] += 1
    return ReactionCounts(**counts, total=len(reactions))

@translate_storage_errors("Failed to fetch reactions")
def list_reactions(db: Session, meme_id: int) -> Tuple[List[ReactionWithUser], ReactionCounts]:
    """Get all reactions on a meme, newest first, with their per-type tally"""
    rows = (
        db.query(Reaction, User.username)
        .outerjoin(User, User.id == Reaction.user_id)
        .filter(Reaction.meme_id == meme_id)
        .order_by(Reaction.created_at.desc(), Reaction.id.desc())
        .all()
    )
    reactions = [
        ReactionWithUser(**ReactionSchema.model_validate(reaction).model_dump(), username=username)
        for reaction, username in rows
    ]
    return reactions, tally_reactions(reactions)
