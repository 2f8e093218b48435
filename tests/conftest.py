# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# - Sets environment variables before app.core.config is imported
# - Gives every test a fresh in-memory SQLite database (foreign keys on)
# - Overrides get_db so route tests hit the same database as the fixtures
# =============================================================================

import os
import tempfile
from datetime import datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UPLOAD_DIRECTORY", tempfile.mkdtemp(prefix="memehub-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import build_engine
from app.deps import get_db
from app.main import app
from app.modules.memes.models.meme import Meme
from app.modules.memes.reactions.models.reaction import Reaction
from app.modules.user_management.models.user import User

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """FastAPI test client with the DB dependency overridden."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(username=None, lat=None, lon=None):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=f"{username}@memehub.io",
            hashed_password="not-a-real-hash",
            location_lat=lat,
            location_long=lon,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_meme(db):
    counter = {"n": 0}

    def _make_meme(uploader, title=None, caption="a caption", category="AI", minutes=None):
        """Memes get increasing created_at unless `minutes` pins it."""
        counter["n"] += 1
        offset = counter["n"] if minutes is None else minutes
        meme = Meme(
            title=title or f"meme {counter['n']}",
            caption=caption,
            image_url="https://img.memehub.io/x.png",
            category=category,
            uploader_id=uploader.id,
            created_at=BASE_TIME + timedelta(minutes=offset),
        )
        db.add(meme)
        db.commit()
        db.refresh(meme)
        return meme

    return _make_meme


@pytest.fixture
def add_reactions(db):
    def _add_reactions(meme, users, reaction_type="laugh"):
        for i, user in enumerate(users):
            db.add(Reaction(
                meme_id=meme.id,
                user_id=user.id,
                reaction_type=reaction_type,
                created_at=BASE_TIME + timedelta(seconds=i),
            ))
        db.commit()

    return _add_reactions


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
