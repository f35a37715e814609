from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from meterboard.config import get_settings

# Initialize Base class for declarative models
Base = declarative_base()

SQLALCHEMY_DATABASE_URL = get_settings().database_url

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # Needed for SQLite

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

__all__ = ['Base', 'SessionLocal', 'engine', 'get_db']


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
