from quizapi.core import config
from quizapi.database import create_store_engine


def test_create_store_engine_keeps_explicit_zero_timeout(tmp_path) -> None:
    engine = create_store_engine(f"sqlite:///{tmp_path / 'quiz.db'}", timeout_seconds=0)
    try:
        assert engine.pool.timeout() == 0
    finally:
        engine.dispose()


def test_create_store_engine_defaults_to_configured_timeout(tmp_path) -> None:
    engine = create_store_engine(f"sqlite:///{tmp_path / 'quiz.db'}")
    try:
        assert engine.pool.timeout() == config.DB_TIMEOUT_SECONDS
    finally:
        engine.dispose()
