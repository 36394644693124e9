"""SQLAlchemy ORM models for budget persistence"""

from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BudgetSnapshot(Base):
    """Latest full budget document (single row, replaced on every save)"""

    __tablename__ = "budget_snapshot"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False)
    active_month = Column(String(7), nullable=False)
    document = Column(JSON, nullable=False)
    saved_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class BudgetBackup(Base):
    """Budget document captured before a month rollover or a restore"""

    __tablename__ = "budget_backup"

    slot = Column(Integer, primary_key=True)  # 0 = pre-restore copy, 1..n = rotating slots
    month = Column(String(7), nullable=False)
    document = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=False), nullable=False)
