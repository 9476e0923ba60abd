from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from app.core.config import settings

Base = declarative_base()

engine = None
SessionLocal = None

if settings.DATABASE_URL:
    if settings.DATABASE_URL.startswith("sqlite"):
        # one shared connection so in-memory databases survive across threads
        engine = create_engine(
            settings.DATABASE_URL,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(settings.DATABASE_URL, future=True)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
