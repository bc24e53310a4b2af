"""
Database models for transgate.
"""

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CacheEntry(Base):
    """
    Cached translation response.

    Rows whose expires_at is in the past are treated as absent.
    """
    __tablename__ = "cache"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    expires_at = Column(Integer, nullable=False, index=True)
