from typing import Any

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from app.deps import get_db, get_current_user
from app.modules.user_management.models.user import User
from app.modules.memes.reactions.schemas.reaction import (
    ReactionCreate, ReactionListResponse, ReactionMutationResponse,
)
from app.modules.memes.reactions.services.reaction import (
    delete_reaction, list_reactions, update_reaction, upsert_reaction,
)

router = APIRouter()

@router.post("/{meme_id}/reactions", response_model=ReactionMutationResponse, status_code=status.HTTP_201_CREATED)
def react_to_meme(
    *,
    db: Session = Depends(get_db),
    meme_id: int = Path(..., description="The ID of the meme to react to"),
    reaction_in: ReactionCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Add a reaction to a meme, or change the caller's existing one"""
    result = upsert_reaction(db, meme_id, current_user.id, reaction_in.reaction_type)

    if not result.created:
        response.status_code = status.HTTP_200_OK
        return {"message": "Reaction updated successfully", "reaction": result.reaction}

    return {"message": "Reaction added successfully", "reaction": result.reaction}

@router.get("/{meme_id}/reactions", response_model=ReactionListResponse)
def read_reactions_by_meme_id(
    *,
    db: Session = Depends(get_db),
    meme_id: int = Path(..., description="The ID of the meme to get reactions for"),
) -> Any:
    """Get reactions on a meme with counts by type"""
    reactions, counts = list_reactions(db, meme_id)
    return {"reactions": reactions, "counts": counts}

@router.put("/reactions/{reaction_id}", response_model=ReactionMutationResponse)
def update_own_reaction(
    *,
    db: Session = Depends(get_db),
    reaction_id: int = Path(..., description="The ID of the reaction to change"),
    reaction_in: ReactionCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Change the type of one of the caller's reactions"""
    reaction = update_reaction(db, reaction_id, current_user.id, reaction_in.reaction_type)
    return {"message": "Reaction updated successfully", "reaction": reaction}

@router.delete("/reactions/{reaction_id}", response_model=ReactionMutationResponse)
def delete_own_reaction(
    *,
    db: Session = Depends(get_db),
    reaction_id: int = Path(..., description="The ID of the reaction to remove"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete one of the caller's reactions"""
    delete_reaction(db, reaction_id, current_user.id)
    return {"message": "Reaction deleted successfully"}
