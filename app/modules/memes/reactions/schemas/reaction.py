from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class ReactionCreate(BaseModel):
    reaction_type: str  # laugh, robot, think

class Reaction(BaseModel):
    """Reaction model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    meme_id: int
    user_id: int
    reaction_type: str
    created_at: Optional[datetime] = None

class ReactionWithUser(Reaction):
    username: Optional[str] = None

class ReactionCounts(BaseModel):
    """Per-type tally computed from the listed reactions"""
    laugh: int = 0
    robot: int = 0
    think: int = 0
    total: int = 0

class ReactionListResponse(BaseModel):
    reactions: List[ReactionWithUser]
    counts: ReactionCounts

class ReactionMutationResponse(BaseModel):
    message: str
    reaction: Optional[Reaction] = None
