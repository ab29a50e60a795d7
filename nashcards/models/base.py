"""
SQLAlchemy 2.0 async DeclarativeBase for Nash Cards.

All table models inherit from this Base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all Nash Cards database models."""
    pass
