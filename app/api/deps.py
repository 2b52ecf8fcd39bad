from app.config import get_settings
from app.infrastructure.db.mysql_engine import build_engine, build_sessionmaker

settings = get_settings()

# Falls back to an in-memory sqlite database when DATABASE_URL is not set
engine = build_engine(settings)
AsyncSessionLocal = build_sessionmaker(engine)
