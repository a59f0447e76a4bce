"""
Request pipeline: decorators that wrap a route handler.

A handler is ``async (Request) -> Response``, the shape FastAPI builds for each
route. Every decorator takes one handler and returns another, so routers can
pick the subset they need through ``pipeline_route``:

    BasicRoute = pipeline_route(with_logging, with_panic_recovery, with_store_session)

The first decorator listed is the outermost one.
"""
import functools
import logging
import time
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.responses import Response

from quizapi.core.errors import QuizError


logger = logging.getLogger(__name__)

Handler = Callable[[Request], Awaitable[Response]]
Decorator = Callable[[Handler], Handler]

CONTROLLED_ERRORS = (QuizError, HTTPException, RequestValidationError)


def status_for_exception(exc: Exception) -> int:
    if isinstance(exc, (QuizError, HTTPException)):
        return exc.status_code
    if isinstance(exc, RequestValidationError):
        return 400
    return 500


def with_store_session(handler: Handler) -> Handler:
    """Attach a session from the app's shared factory to ``request.state.db``."""

    @functools.wraps(handler)
    async def wrapped(request: Request) -> Response:
        db = request.app.state.session_factory()
        request.state.db = db
        try:
            return await handler(request)
        finally:
            await run_in_threadpool(db.close)

    return wrapped


def with_panic_recovery(handler: Handler) -> Handler:
    """Turn unexpected exceptions into a 500 response so the server keeps serving."""

    @functools.wraps(handler)
    async def wrapped(request: Request) -> Response:
        try:
            return await handler(request)
        except CONTROLLED_ERRORS:
            raise
        except Exception:
            logger.exception('Unhandled error while serving %s %s', request.method, request.url.path)
            return JSONResponse(status_code=500, content={'error': 'Internal server error'})

    return wrapped


def with_logging(handler: Handler) -> Handler:
    """Log method, path, final status and duration of every request."""

    @functools.wraps(handler)
    async def wrapped(request: Request) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await handler(request)
            status_code = response.status_code
            return response
        except Exception as exc:
            status_code = status_for_exception(exc)
            raise
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info('%s %s %s %.1fms', request.method, request.url.path, status_code, elapsed_ms)

    return wrapped


def compose(*decorators: Decorator) -> Decorator:
    def apply(handler: Handler) -> Handler:
        for decorator in reversed(decorators):
            handler = decorator(handler)
        return handler

    return apply


def pipeline_route(*decorators: Decorator) -> type[APIRoute]:
    """Build an APIRoute class that wraps each route handler when it is registered."""
    wrap = compose(*decorators)

    class PipelineRoute(APIRoute):
        def get_route_handler(self) -> Handler:
            return wrap(super().get_route_handler())

    return PipelineRoute


BasicRoute = pipeline_route(with_logging, with_panic_recovery, with_store_session)
PublicRoute = pipeline_route(with_logging, with_panic_recovery)


def get_db(request: Request) -> Session:
    db = getattr(request.state, 'db', None)
    if db is None:
        raise RuntimeError('No store session on the request; the route needs with_store_session.')
    return db
