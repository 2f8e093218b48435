from sqlalchemy import Column, Integer, String, DateTime, Float
from sqlalchemy.sql import func

from app.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    # Both set or both NULL
    location_lat = Column(Float, nullable=True)
    location_long = Column(Float, nullable=True)
    created_at = Column(DateTime, default=func.now())

    @property
    def has_location(self) -> bool:
        return self.location_lat is not None and self.location_long is not None
