import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core import config
from backend.database import create_schema
from backend.routes import assignment_routes, auth_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

logger = logging.getLogger(__name__)

app = FastAPI(title='EdTech Assignment Tracker API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    for error in errors:
        if error.get('type') == 'value_error' and 'error' in error.get('ctx', {}):
            return str(error['ctx']['error'])
    for error in errors:
        if error.get('type') == 'json_invalid':
            return 'Request body must be valid JSON'
    if errors:
        field = errors[0].get('loc', ('body',))[-1]
        return f'Invalid value for {field}'
    return 'Invalid request'


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={'error': exc.detail},
        headers=getattr(exc, 'headers', None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'error': validation_message(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error': 'Internal server error'},
    )


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        create_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/api/ping')
def ping():
    return {'message': 'EdTech Assignment Tracker API'}


os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount(f'/{config.UPLOADS_URL_PATH}', StaticFiles(directory=config.UPLOAD_DIR), name='uploads')

app.include_router(auth_routes.router, prefix='/api')
app.include_router(assignment_routes.router, prefix='/api')
