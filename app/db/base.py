# Import all models here so Alembic can detect them
from app.db.session import Base

# Import all models below
from app.modules.user_management.models.user import User
from app.modules.memes.models.meme import Meme
from app.modules.memes.reactions.models.reaction import Reaction
