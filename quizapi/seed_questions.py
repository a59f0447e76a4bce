"""Load questions from a JSON file into the store.

Usage:
    python -m quizapi.seed_questions questions.json

The file holds a list of objects shaped like
``{"id": 1, "text": "...", "options": ["A", "B", "C"], "index": 1}``.
"""
import json
import sys

from pydantic import BaseModel, ValidationError, model_validator
from sqlalchemy.exc import SQLAlchemyError

from quizapi import repository
from quizapi.core.errors import StorageError
from quizapi.database import create_session_factory, create_store_engine, ensure_schema


class QuestionSeed(BaseModel):
    id: int
    text: str
    options: list[str]
    index: int

    @model_validator(mode='after')
    def validate_index(self) -> 'QuestionSeed':
        if not 0 <= self.index < len(self.options):
            raise ValueError(f'Question {self.id}: index {self.index} is not one of its options.')
        return self


def load_seeds(path: str) -> list[QuestionSeed]:
    with open(path, encoding='utf-8') as handle:
        raw = json.load(handle)
    return [QuestionSeed.model_validate(item) for item in raw]


def seed_questions(db, seeds: list[QuestionSeed]) -> int:
    for seed in seeds:
        repository.save_question(db, seed.id, seed.text, seed.options, seed.index)
    return len(seeds)


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print(__doc__, file=sys.stderr)
        sys.exit(2)

    try:
        seeds = load_seeds(argv[0])
    except (OSError, ValueError, ValidationError) as exc:
        print(f"Could not read questions: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        engine = create_store_engine()
        ensure_schema(engine)
    except SQLAlchemyError as exc:
        print(f"Could not open the store: {exc}", file=sys.stderr)
        sys.exit(1)

    db = create_session_factory(engine)()
    try:
        count = seed_questions(db, seeds)
    except StorageError as exc:
        print(f"Could not store questions: {exc.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()
        engine.dispose()

    print(f"Seeded {count} questions.")


if __name__ == "__main__":
    main()
