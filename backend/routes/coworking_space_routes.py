import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import require_role
from backend.database import MAX_ID, get_db
from backend.models.coworking_space import CoworkingSpace
from backend.models.user import ROLE_ADMIN, User

router = APIRouter(tags=['coworking-spaces'])

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100


def _validate_name(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Please add a name.')
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValueError(f'Name can not be more than {MAX_NAME_LENGTH} characters.')
    return normalized


def _validate_location(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Please add a location.')
    return normalized


def _validate_coordinates(latitude: float | None, longitude: float | None) -> None:
    if latitude is not None and not -90 <= latitude <= 90:
        raise ValueError('Latitude must be between -90 and 90.')
    if longitude is not None and not -180 <= longitude <= 180:
        raise ValueError('Longitude must be between -180 and 180.')


class CoworkingSpaceRequest(BaseModel):
    name: str
    location: str
    available_seats: int
    latitude: float | None = None
    longitude: float | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _validate_name(value)

    @field_validator('location')
    @classmethod
    def validate_location(cls, value: str) -> str:
        return _validate_location(value)

    @field_validator('available_seats')
    @classmethod
    def validate_available_seats(cls, value: int) -> int:
        if value < 1:
            raise ValueError('Available seats must be at least 1.')
        return value

    @model_validator(mode='after')
    def validate_coordinates(self):
        _validate_coordinates(self.latitude, self.longitude)
        return self


class CoworkingSpaceUpdateRequest(BaseModel):
    name: str | None = None
    location: str | None = None
    available_seats: int | None = None
    latitude: float | None = None
    longitude: float | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        return None if value is None else _validate_name(value)

    @field_validator('location')
    @classmethod
    def validate_location(cls, value: str | None) -> str | None:
        return None if value is None else _validate_location(value)

    @field_validator('available_seats')
    @classmethod
    def validate_available_seats(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError('Available seats must be at least 1.')
        return value

    @model_validator(mode='after')
    def validate_coordinates(self):
        _validate_coordinates(self.latitude, self.longitude)
        return self


class CoworkingSpaceResponse(BaseModel):
    id: int
    name: str
    location: str
    available_seats: int
    latitude: float | None = None
    longitude: float | None = None

    class Config:
        from_attributes = True


def get_space_or_404(db: Session, space_id: int) -> CoworkingSpace:
    space = db.get(CoworkingSpace, space_id)
    if space is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Co-working space not found.',
        )
    return space


def commit_space_changes(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A co-working space with this name already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


@router.get('')
def list_coworking_spaces(db: Session = Depends(get_db)):
    try:
        spaces = db.query(CoworkingSpace).order_by(CoworkingSpace.name.asc()).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc

    return {
        'success': True,
        'count': len(spaces),
        'data': [CoworkingSpaceResponse.model_validate(space) for space in spaces],
    }


@router.get('/{space_id}')
def get_coworking_space(space_id: int = Path(gt=0, le=MAX_ID), db: Session = Depends(get_db)):
    space = get_space_or_404(db, space_id)
    return {'success': True, 'data': CoworkingSpaceResponse.model_validate(space)}


@router.post('', status_code=status.HTTP_201_CREATED)
def create_coworking_space(
    data: CoworkingSpaceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
):
    space = CoworkingSpace(**data.model_dump())
    db.add(space)
    commit_space_changes(db)
    db.refresh(space)

    logger.info('Admin %s created co-working space %s', current_user.id, space.id)
    return {'success': True, 'data': CoworkingSpaceResponse.model_validate(space)}


@router.put('/{space_id}')
def update_coworking_space(
    space_id: Annotated[int, Path(gt=0, le=MAX_ID)],
    data: CoworkingSpaceUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
):
    space = get_space_or_404(db, space_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in {'name', 'location', 'available_seats'}:
            continue
        setattr(space, field, value)
    commit_space_changes(db)
    db.refresh(space)

    logger.info('Admin %s updated co-working space %s', current_user.id, space.id)
    return {'success': True, 'data': CoworkingSpaceResponse.model_validate(space)}


@router.delete('/{space_id}')
def delete_coworking_space(
    space_id: int = Path(gt=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
):
    space = get_space_or_404(db, space_id)
    db.delete(space)
    commit_space_changes(db)

    logger.info('Admin %s deleted co-working space %s and its reservations', current_user.id, space_id)
    return {'success': True, 'data': {}}
