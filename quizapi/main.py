import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from quizapi.core import config
from quizapi.core.errors import QuizError
from quizapi.database import create_session_factory, create_store_engine, ensure_schema
from quizapi.pipeline import PublicRoute
from quizapi.routes import question_routes, user_routes

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def error_response(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request.'
    first = errors[0]
    location = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
    message = first.get('msg', 'Invalid value')
    return f'{location}: {message}' if location else message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(QuizError)
    async def handle_quiz_error(request: Request, exc: QuizError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException):
        return error_response(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, _validation_message(exc))


def create_app(database_url: str | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        engine = create_store_engine(database_url)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        try:
            ensure_schema(engine)
        except SQLAlchemyError:
            logger.exception('Store initialization failed. Check DATABASE_URL.')
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title='Quiz API', lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_methods=config.CORS_ALLOW_METHODS,
        allow_headers=config.CORS_ALLOW_HEADERS,
    )

    register_exception_handlers(app)

    meta_router = APIRouter(route_class=PublicRoute)

    @meta_router.get('/')
    def root():
        return {'status': 'Quiz API Running'}

    app.include_router(meta_router)
    app.include_router(user_routes.router, prefix='/api/users')
    app.include_router(question_routes.router, prefix='/api/questions')

    return app


app = create_app()


def run() -> None:
    config.validate_runtime_config()
    configure_logging()
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == '__main__':
    run()
