import logging
import math

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from quizapi.core import config


logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_in_memory_sqlite(database_url: str) -> bool:
    return database_url in {'sqlite://', 'sqlite:///'} or ':memory:' in database_url


def create_store_engine(database_url: str | None = None, timeout_seconds: float | None = None) -> Engine:
    """Build the process-wide engine with the store deadline applied to every call."""
    database_url = database_url or config.DATABASE_URL
    if timeout_seconds is None:
        timeout_seconds = config.DB_TIMEOUT_SECONDS

    engine_kwargs = {'echo': config.SQL_ECHO}

    if database_url.startswith('sqlite'):
        engine_kwargs['connect_args'] = {'check_same_thread': False, 'timeout': timeout_seconds}
        if _is_in_memory_sqlite(database_url):
            engine_kwargs['poolclass'] = StaticPool
        else:
            engine_kwargs['pool_timeout'] = timeout_seconds
    else:
        engine_kwargs['pool_timeout'] = timeout_seconds
        engine_kwargs['pool_pre_ping'] = True
        if database_url.startswith('postgresql'):
            engine_kwargs['connect_args'] = {
                'connect_timeout': max(1, math.ceil(timeout_seconds)),
                'options': f'-c statement_timeout={int(timeout_seconds * 1000)}',
            }

    return create_engine(database_url, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def ensure_schema(engine: Engine) -> None:
    # Importing the models registers the users and questions tables on Base.
    from quizapi.models import question, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info('Store schema ready: %s', ', '.join(sorted(Base.metadata.tables)))
