from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func

from app.db.session import Base

MEME_CATEGORIES = ("AI", "Grok", "xAI", "Futuristic")
MAX_CAPTION_LENGTH = 140

class Meme(Base):
    __tablename__ = "memes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    caption = Column(String(MAX_CAPTION_LENGTH), nullable=False)
    image_url = Column(String(500), nullable=False)
    category = Column(String(20), nullable=False, index=True)  # AI, Grok, xAI, Futuristic
    uploader_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=func.now(), index=True)
