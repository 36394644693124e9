"""Database session management"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from bill_planner.config import settings
from bill_planner.infrastructure.database.models import Base


def build_engine(database_url: str):
    """SQLite needs check_same_thread off because FastAPI runs sync routes in a threadpool"""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Create tables if they do not exist yet"""
    Base.metadata.create_all(bind=bind or engine)
