import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core.config import Settings, load_settings, validate_runtime_config
from backend.core.errors import register_exception_handlers
from backend.core.logging_config import setup_logging
from backend.database import Database
from backend.routes import auth_routes, course_routes, enrollment_routes

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or load_settings()
    validate_runtime_config(settings)
    setup_logging(settings.log_level)

    if database is None and settings.persistence_enabled:
        database = Database(settings.database_url)
    if database is None:
        logger.warning('DATABASE_URL is not set. Database functionality will be disabled.')

    app = FastAPI(title='Course Portal API')
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)

    @app.on_event('startup')
    def initialize_database() -> None:
        if app.state.database is None:
            return
        try:
            app.state.database.create_all()
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')

    @app.get('/')
    def root():
        return {'status': 'Course Portal API Running'}

    app.include_router(auth_routes.router, prefix='/api/auth')
    app.include_router(course_routes.router, prefix='/api/courses')
    app.include_router(enrollment_routes.router, prefix='/api')

    return app


app = create_app()


if __name__ == '__main__':
    import uvicorn

    uvicorn.run('backend.main:app', host='0.0.0.0', port=8000)
