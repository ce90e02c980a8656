import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, engine, ensure_reservation_schema
from backend.models import coworking_space, reservation, user  # noqa: F401
from backend.routes import auth_routes, coworking_space_routes, reservation_routes
from backend.services.errors import ReservationError

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Co-working Space Reservations API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_reservation_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    logger.warning(
        'Reservation request %s %s rejected (%s): %s',
        request.method, request.url.path, exc.status_code, exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.detail})


@app.get('/')
def root():
    return {'status': 'Co-working Reservations API Running'}


app.include_router(auth_routes.router, prefix=f'{config.API_PREFIX}/auth')
app.include_router(coworking_space_routes.router, prefix=f'{config.API_PREFIX}/coworking-spaces')
app.include_router(reservation_routes.router, prefix=f'{config.API_PREFIX}/reservations')
