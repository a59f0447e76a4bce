"""
Typed reads and writes for users and questions.

Every function takes the request's session first. SQLAlchemy failures are
rolled back and surfaced as StorageError; nothing here retries.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from quizapi.core.errors import NotFoundError, StorageError
from quizapi.models.question import Question
from quizapi.models.user import User

STREAM_BATCH_SIZE = 100

_UPSERT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}

_TIMEOUT_MARKERS = ('timeout', 'timed out', 'database is locked')


def _storage_error(exc: SQLAlchemyError) -> StorageError:
    message = str(getattr(exc, 'orig', None) or exc)
    if isinstance(exc, PoolTimeoutError) or any(marker in message.lower() for marker in _TIMEOUT_MARKERS):
        return StorageError('timeout')
    return StorageError(message)


@contextmanager
def storage_errors(db: Session):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        raise _storage_error(exc) from exc


def _stream(db: Session, query) -> Iterator:
    with storage_errors(db):
        yield from query.yield_per(STREAM_BATCH_SIZE)


# -------- Users --------

def create_user(db: Session, user_id: str, email: str, name: str | None = None) -> User:
    """Upsert a user by id. Re-creating keeps the stored score."""
    dialect = db.get_bind().dialect.name
    if dialect not in _UPSERT_INSERTS:
        raise StorageError(f'Unsupported store dialect: {dialect}')

    # One INSERT .. ON CONFLICT so overlapping creates for the same email both succeed.
    statement = _UPSERT_INSERTS[dialect](User).values(id=user_id, email=email, name=name, score=0)
    statement = statement.on_conflict_do_update(
        index_elements=[User.id],
        set_={'email': statement.excluded.email, 'name': statement.excluded.name},
    )
    with storage_errors(db):
        db.execute(statement)
        db.commit()
        user = db.get(User, user_id, populate_existing=True)
    if user is None:
        raise StorageError('User was not stored')
    return user


def get_user(db: Session, user_id: str, refresh: bool = False) -> User:
    with storage_errors(db):
        user = db.get(User, user_id, populate_existing=refresh)
    if user is None:
        raise NotFoundError('User not found')
    return user


def list_users(db: Session) -> Iterator[User]:
    return _stream(db, db.query(User).order_by(User.id))


def increment_score(db: Session, user_id: str) -> None:
    # Single UPDATE so concurrent submissions cannot lose an increment.
    with storage_errors(db):
        result = db.execute(
            update(User)
            .where(User.id == user_id)
            .values(score=User.score + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    if result.rowcount == 0:
        raise NotFoundError('User not found')


# -------- Questions --------

def get_question(db: Session, question_id: int) -> Question:
    with storage_errors(db):
        question = db.get(Question, question_id)
    if question is None:
        raise NotFoundError('Question not found')
    return question


def list_questions(db: Session) -> Iterator[Question]:
    return _stream(db, db.query(Question).order_by(Question.id))


def save_question(db: Session, question_id: int, text: str, options: list[str], index: int) -> Question:
    with storage_errors(db):
        question = db.get(Question, question_id)
        if question is None:
            question = Question(id=question_id)
            db.add(question)
        question.text = text
        question.options = list(options)
        question.index = index
        db.commit()
        db.refresh(question)
    return question
