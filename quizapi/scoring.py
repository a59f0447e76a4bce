import logging

from sqlalchemy.orm import Session

from quizapi import repository
from quizapi.models.user import User


logger = logging.getLogger(__name__)


def is_correct(answer_index: int, correct_index: int) -> bool:
    # Out-of-range answers simply never match.
    return answer_index == correct_index


def submit_answer(db: Session, question_id: int, user_id: str, answer_index: int) -> User:
    """Check an answer and award one point when it matches the stored option.

    Raises NotFoundError for a missing question or user and StorageError when
    the store fails, including a failed increment. The returned user is read
    back from the store so it always reflects the persisted score.
    """
    question = repository.get_question(db, question_id)
    user = repository.get_user(db, user_id)

    if not is_correct(answer_index, question.index):
        logger.debug('User %s answered question %s incorrectly', user_id, question_id)
        return user

    repository.increment_score(db, user_id)
    logger.info('User %s scored on question %s', user_id, question_id)

    return repository.get_user(db, user_id, refresh=True)
