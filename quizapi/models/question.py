"""Question model definitions."""

from sqlalchemy import JSON, Column, Integer, String
from quizapi.database import Base


class Question(Base):
    """A multiple-choice question; ``index`` is the 0-based correct option."""
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    text = Column(String, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    index = Column(Integer, nullable=False)
