from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from app.db.session import Base

REACTION_TYPES = ("laugh", "robot", "think")

class Reaction(Base):
    __tablename__ = "reactions"

    id = Column(Integer, primary_key=True, index=True)
    meme_id = Column(Integer, ForeignKey("memes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reaction_type = Column(String(10), nullable=False)  # laugh, robot, think
    created_at = Column(DateTime, default=func.now())

    # One reaction per user per meme; the upsert relies on this constraint
    __table_args__ = (
        UniqueConstraint("meme_id", "user_id", name="unique_meme_reaction"),
    )
