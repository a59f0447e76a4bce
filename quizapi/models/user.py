"""User model definitions."""

from sqlalchemy import CheckConstraint, Column, Integer, String
from quizapi.database import Base


class User(Base):
    """A quiz player, keyed by the hash of their email."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_users_score_non_negative"),
    )

    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=False)
    name = Column(String, nullable=True)
    score = Column(Integer, nullable=False, default=0, server_default="0")
