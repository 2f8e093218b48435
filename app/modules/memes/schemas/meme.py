from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class MemeBase(BaseModel):
    title: str
    caption: str
    category: str

class MemeCreate(MemeBase):
    image_url: Optional[str] = None

class MemeUpdate(BaseModel):
    title: Optional[str] = None
    caption: Optional[str] = None
    category: Optional[str] = None

class Meme(MemeBase):
    """Meme model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: str
    uploader_id: int
    created_at: Optional[datetime] = None

class MemeWithCount(Meme):
    """Meme annotated with its uploader and aggregated reaction count"""
    uploader_username: Optional[str] = None
    reaction_count: int = 0

class NearbyMeme(MemeWithCount):
    distance_km: float

class MemeListResponse(BaseModel):
    memes: List[MemeWithCount]
    count: int

class NearbyMemeListResponse(BaseModel):
    memes: List[NearbyMeme]
    count: int

class MemeUploadResponse(BaseModel):
    message: str
    meme: Meme

class MessageResponse(BaseModel):
    message: str
